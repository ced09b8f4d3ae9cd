"""
Tests for the status REST API.
"""

import asyncio
import unittest

from obmatcher.agent.poll_loop import PollLoop
from obmatcher.api.rest_api import create_app
from obmatcher.api.validators import validate_book_side, validate_depth
from obmatcher.config.settings import Settings
from obmatcher.core.order import Order
from obmatcher.core.price import Price
from obmatcher.utils.performance import PerformanceMonitor


def make_order(order_id, side, num, den, remaining):
    return Order(
        order_id=order_id,
        owner=f"owner{order_id}.testnet",
        side=side,
        price=Price(num, den),
        remaining_base=remaining,
    )


class StaticLedger:
    """Always returns the same snapshot."""

    def __init__(self, orders):
        self.orders = orders

    async def fetch_open_orders(self):
        return list(self.orders)


class TestApiValidators(unittest.TestCase):
    """Test cases for query validation."""

    def test_book_side(self):
        """Test side filter parsing."""
        self.assertEqual(validate_book_side(None), (True, None, "both"))
        self.assertEqual(validate_book_side("BUY")[2], "buy")
        self.assertFalse(validate_book_side("bids")[0])

    def test_depth(self):
        """Test depth parsing."""
        self.assertEqual(validate_depth(None)[2], 50)
        self.assertEqual(validate_depth("3")[2], 3)
        self.assertFalse(validate_depth("0")[0])
        self.assertFalse(validate_depth("501")[0])
        self.assertFalse(validate_depth("ten")[0])


class TestRestApi(unittest.TestCase):
    """Test cases for the status endpoints."""

    def setUp(self):
        """Set up test fixtures."""
        orders = [
            make_order(1, "sell", 5, 1, 10),
            make_order(2, "sell", 3, 1, 10),
            make_order(3, "buy", 4, 1, 5),
            make_order(4, "buy", 1, 1, 5),
        ]
        self.agent = PollLoop(
            ledger=StaticLedger(orders),
            dry_run=True,
            poll_interval=0,
            monitor=PerformanceMonitor(),
        )
        self.settings = Settings()
        self.settings.private_key = "ed25519:secret"
        self.client = create_app(self.agent, self.settings).test_client()

    def run_cycle(self):
        asyncio.run(self.agent.run_cycle())

    def test_health_check(self):
        """Test the health endpoint."""
        response = self.client.get('/health')

        self.assertEqual(response.status_code, 200)
        data = response.get_json()
        self.assertEqual(data['status'], 'healthy')
        self.assertEqual(data['cycles'], 0)

    def test_last_match_before_any_cycle(self):
        """Test 404 when nothing was selected yet."""
        response = self.client.get('/match/last')
        self.assertEqual(response.status_code, 404)

    def test_last_match(self):
        """Test the last selected match."""
        self.run_cycle()

        response = self.client.get('/match/last')

        self.assertEqual(response.status_code, 200)
        data = response.get_json()
        self.assertEqual(data['match'], {'maker_id': 2, 'taker_id': 3, 'base_fill': '5', 'quote_paid': '15'})
        self.assertTrue(data['dry_run'])

    def test_order_book_in_scan_order(self):
        """Test the mirrored book, sells ascending and buys descending."""
        self.run_cycle()

        response = self.client.get('/orderbook')

        self.assertEqual(response.status_code, 200)
        data = response.get_json()
        self.assertEqual([o['id'] for o in data['sells']], [2, 1])
        self.assertEqual([o['id'] for o in data['buys']], [3, 4])
        self.assertEqual(data['statistics']['sell_orders'], 2)

    def test_order_book_side_and_depth(self):
        """Test side filtering and depth limiting."""
        self.run_cycle()

        response = self.client.get('/orderbook?side=sell&depth=1')

        data = response.get_json()
        self.assertNotIn('buys', data)
        self.assertEqual([o['id'] for o in data['sells']], [2])

    def test_order_book_invalid_query(self):
        """Test query validation errors."""
        self.assertEqual(self.client.get('/orderbook?side=left').status_code, 400)
        self.assertEqual(self.client.get('/orderbook?depth=-1').status_code, 400)

    def test_statistics(self):
        """Test the statistics endpoint."""
        self.run_cycle()

        response = self.client.get('/statistics')

        self.assertEqual(response.status_code, 200)
        data = response.get_json()
        self.assertEqual(data['cycles'], 1)
        self.assertEqual(data['selector']['matches_found'], 1)
        self.assertEqual(data['performance']['counters']['dry_run_matches'], 1)

    def test_config_hides_private_key(self):
        """Test that the signing key is never exposed."""
        response = self.client.get('/config')

        self.assertEqual(response.status_code, 200)
        data = response.get_json()
        self.assertTrue(data['has_private_key'])
        self.assertNotIn('ed25519:secret', response.get_data(as_text=True))

    def test_unknown_endpoint(self):
        """Test the JSON 404 handler."""
        response = self.client.get('/orders')
        self.assertEqual(response.status_code, 404)
        self.assertEqual(response.get_json()['error'], 'Endpoint not found')

    def test_method_not_allowed(self):
        """Test the JSON 405 handler."""
        response = self.client.post('/health')
        self.assertEqual(response.status_code, 405)


if __name__ == '__main__':
    unittest.main()
