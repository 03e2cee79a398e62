"""
Tests for FinderSession: search flow, random picks, supersession and favorites.
"""

import random
import unittest
from unittest.mock import Mock

from commander_finder.color_identity import ColorIdentityResolver, EmptyIdentity
from commander_finder.scryfall_service import SearchFailed
from commander_finder.search_session import CancellationToken, FinderSession, SearchOutcome
from commander_finder.state import AppState


RAW_RESULTS = [
    {'name': 'Anowon, the Ruin Thief', 'scryfall_uri': 'http://x/anowon',
     'image_uris': {'normal': 'http://x/anowon.png'}},
    {'name': 'Dragonlord Silumgar', 'scryfall_uri': 'http://x/silumgar'},
    {'name': 'Lazav, Dimir Mastermind', 'scryfall_uri': 'http://x/lazav'},
]


class TestCancellationToken(unittest.TestCase):

    def test_cancel(self):
        token = CancellationToken()
        self.assertFalse(token.cancelled)
        token.cancel()
        self.assertTrue(token.cancelled)


class TestFinderSession(unittest.TestCase):
    """Test cases for FinderSession."""

    def setUp(self):
        self.service = Mock()
        self.service.search_cards.return_value = list(RAW_RESULTS)
        self.resolver = ColorIdentityResolver(rng=random.Random(11))
        self.session = FinderSession(self.resolver, self.service)

    def test_search_all(self):
        outcome = self.session.search("blue-black")

        self.assertIsInstance(outcome, SearchOutcome)
        self.assertEqual(outcome.code, "UB")
        self.assertEqual(str(outcome.query), "identity=UB is:commander legal:commander")
        self.assertEqual([r.name for r in outcome.records], [r['name'] for r in RAW_RESULTS])
        self.assertEqual(outcome.total_found, 3)
        self.assertFalse(outcome.random_pick)

        query = self.service.search_cards.call_args[0][0]
        self.assertEqual(query.code, "UB")

    def test_search_random_pick(self):
        outcome = self.session.search("UB", pick_random=True)

        self.assertTrue(outcome.random_pick)
        self.assertEqual(len(outcome.records), 1)
        self.assertIn(outcome.records[0].name, [r['name'] for r in RAW_RESULTS])
        self.assertEqual(outcome.total_found, 3)

    def test_search_random_pick_no_results(self):
        self.service.search_cards.return_value = []

        outcome = self.session.search("UB", pick_random=True)

        self.assertEqual(outcome.records, [])

    def test_invalid_input_does_not_search(self):
        with self.assertRaises(EmptyIdentity):
            self.session.search("   ")
        self.service.search_cards.assert_not_called()

    def test_search_failure_propagates(self):
        self.service.search_cards.side_effect = SearchFailed("Server error", status_code=500)

        with self.assertRaises(SearchFailed):
            self.session.search("W")

        # The failed search does not leave a token behind
        self.assertIsNone(self.session._current_token)

    def test_search_random_identity(self):
        outcome = self.session.search_random_identity()

        self.assertTrue(1 <= len(outcome.code) <= 5)
        self.assertEqual(self.service.search_cards.call_args[0][0].code, outcome.code)

    def test_begin_search_cancels_previous(self):
        first = self.session.begin_search()
        second = self.session.begin_search()

        self.assertTrue(first.cancelled)
        self.assertFalse(second.cancelled)

    def test_superseded_search_is_discarded(self):
        def search_then_supersede(query, cancel_token=None):
            # A newer search starts while this one is in flight
            self.session.begin_search()
            return list(RAW_RESULTS)

        self.service.search_cards.side_effect = search_then_supersede

        self.assertIsNone(self.session.search("UB"))

    def test_cancel_token_passed_to_service(self):
        self.session.search("G")
        token = self.service.search_cards.call_args[1]['cancel_token']
        self.assertIsInstance(token, CancellationToken)
        self.assertFalse(token.cancelled)

    def test_save_favorite(self):
        outcome = self.session.search("UB")

        record = self.session.save_favorite(outcome, "dragonlord silumgar")

        self.assertEqual(record.name, "Dragonlord Silumgar")
        self.assertTrue(self.session.state.has_favorite("Dragonlord Silumgar"))

    def test_save_favorite_unknown_name(self):
        outcome = self.session.search("UB")

        with self.assertRaises(ValueError):
            self.session.save_favorite(outcome, "Sol Ring")
        self.assertEqual(self.session.state, AppState())


if __name__ == '__main__':
    unittest.main()
