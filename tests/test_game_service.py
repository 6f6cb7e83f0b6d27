#!/usr/bin/env python3
"""
Tests for the enrichment pipeline and play marks in GameService.

Run with:
    python -m pytest tests/test_game_service.py
"""
import unittest
from datetime import date

from catalog_fixtures import TmpCatalogMixin

from game_catalog_api.app.core.errors import EnrichmentError, FilterValidationError, NotFoundError
from game_catalog_api.app.schemas.game import GameFilter
from game_catalog_api.app.services.game_service import GameService


class TestEnrichment(TmpCatalogMixin):

    def test_empty_catalog(self):
        self.assertEqual(self.run_async(GameService.list_games()), [])

    def test_dto_fields(self):
        game_id = self.add_game(
            'Settlers of Catan',
            description='Trade and build',
            date_released='2023-04-13 18:45:10',
            playtime_minutes=90,
            player_min=3,
            player_max=4,
            location='Hubben',
        )
        [game] = self.run_async(GameService.list_games())
        self.assertEqual(game.model_dump(by_alias=True), {
            'id': game_id,
            'name': 'Settlers of Catan',
            'description': 'Trade and build',
            'platformName': 'Board game',
            'releaseDate': date(2023, 4, 13),
            'playtimeMinutes': 90,
            'playerMin': 3,
            'playerMax': 4,
            'location': 'Hubben',
            'owner': 'Owner One',
            'isBorrowed': False,
            'ratingAvg': None,
            'ratingUser': None,
            'isPlayed': False,
        })

    def test_release_date_serialised_as_calendar_date(self):
        self.add_game(date_released='2023-04-13 23:59:59')
        [game] = self.run_async(GameService.list_games())
        self.assertEqual(game.model_dump(mode='json', by_alias=True)['releaseDate'], '2023-04-13')

    def test_anonymous_request(self):
        game_id = self.add_game()
        account = self.add_account('user')
        self.add_rating(game_id, account, 4)
        self.add_play_mark(game_id, account)
        [game] = self.run_async(GameService.list_games(None))
        self.assertEqual(game.rating_avg, 4)
        self.assertIsNone(game.rating_user)
        self.assertFalse(game.is_played)

    def test_single_rating_user_and_average_agree(self):
        game_id = self.add_game()
        account = self.add_account('user')
        self.add_rating(game_id, account, 5)
        [game] = self.run_async(GameService.list_games('user'))
        self.assertEqual(game.rating_avg, 5)
        self.assertEqual(game.rating_user, 5)

    def test_borrow_status_per_game(self):
        borrowed = self.add_game('Borrowed')
        returned = self.add_game('Returned')
        account = self.add_account('borrower')
        self.add_borrow(borrowed, account)
        self.add_borrow(returned, account, returned=True)
        status = {g.id: g.is_borrowed for g in self.run_async(GameService.list_games())}
        self.assertEqual(status, {borrowed: True, returned: False})

    def test_played_flags_for_batch(self):
        account = self.add_account('user')
        games = [self.add_game(f'Game {i}') for i in range(6)]
        for game_id in games[::2]:
            self.add_play_mark(game_id, account)
        played = {g.id for g in self.run_async(GameService.list_games('user')) if g.is_played}
        self.assertEqual(played, set(games[::2]))

    def test_unknown_identity_is_treated_as_anonymous(self):
        self.add_game()
        [game] = self.run_async(GameService.list_games('never-seen'))
        self.assertFalse(game.is_played)
        self.assertIsNone(game.rating_user)

    def test_owner_names_per_game(self):
        other = self.add_owner('other', 'Other Owner')
        self.add_game('Mine')
        self.add_game('Theirs', owner_id=other)
        owners = {g.name: g.owner for g in self.run_async(GameService.list_games())}
        self.assertEqual(owners, {'Mine': 'Owner One', 'Theirs': 'Other Owner'})

    def test_missing_owner_name_fails_whole_request(self):
        nameless = self.add_owner('nameless')
        self.add_game('Fine')
        broken = self.add_game('Broken', owner_id=nameless)
        with self.assertRaises(EnrichmentError) as ctx:
            self.run_async(GameService.list_games())
        self.assertEqual(ctx.exception.game_id, broken)


class TestReadPaths(TmpCatalogMixin):

    def setUp(self):
        super().setUp()
        self.add_game('Settlers of Catan', location='Hubben', player_min=3, player_max=4)
        self.add_game('Catan Jr', location='Basement', player_min=2, player_max=4)
        self.add_game('Portal 2', location='Hubben', player_min=1, player_max=2)

    def _names(self, games):
        return [g.name for g in games]

    def test_search(self):
        self.assertEqual(self._names(self.run_async(GameService.search_games('CATAN'))),
                         ['Settlers of Catan', 'Catan Jr'])
        self.assertEqual(len(self.run_async(GameService.search_games(''))), 3)
        self.assertEqual(len(self.run_async(GameService.search_games(None))), 3)

    def test_filter_with_model(self):
        games = self.run_async(GameService.filter_games(GameFilter(name='Catan', location='hub')))
        self.assertEqual(self._names(games), ['Settlers of Catan'])

    def test_filter_with_mapping(self):
        games = self.run_async(GameService.filter_games({'playerCount': 2}))
        self.assertEqual(self._names(games), ['Catan Jr', 'Portal 2'])

    def test_filter_rejects_malformed_mapping(self):
        with self.assertRaises(FilterValidationError):
            self.run_async(GameService.filter_games({'playerCount': 'many'}))

    def test_empty_filter_returns_everything(self):
        self.assertEqual(len(self.run_async(GameService.filter_games({}))), 3)


class TestPlayMarks(TmpCatalogMixin):

    def _is_played(self, game_id, cid='player'):
        games = self.run_async(GameService.filter_games({}, cid))
        return {g.id: g.is_played for g in games}[game_id]

    def test_mark_then_unmark(self):
        game_id = self.add_game()
        self.run_async(GameService.mark_played(game_id, 'player'))
        self.assertTrue(self._is_played(game_id))
        self.run_async(GameService.mark_not_played(game_id, 'player'))
        self.assertFalse(self._is_played(game_id))

    def test_marks_are_per_user(self):
        game_id = self.add_game()
        self.run_async(GameService.mark_played(game_id, 'player'))
        self.assertFalse(self._is_played(game_id, cid='someone-else'))

    def test_mark_twice_is_harmless(self):
        game_id = self.add_game()
        self.run_async(GameService.mark_played(game_id, 'player'))
        self.run_async(GameService.mark_played(game_id, 'player'))
        self.assertTrue(self._is_played(game_id))

    def test_unmark_without_account(self):
        game_id = self.add_game()
        self.run_async(GameService.mark_not_played(game_id, 'stranger'))
        self.assertFalse(self._is_played(game_id, cid='stranger'))

    def test_unknown_game(self):
        with self.assertRaises(NotFoundError):
            self.run_async(GameService.mark_played(404, 'player'))
        with self.assertRaises(NotFoundError):
            self.run_async(GameService.mark_not_played(404, 'player'))


class TestListOwners(TmpCatalogMixin):

    def test_owners_with_games(self):
        self.add_owner('idle', 'Idle')
        self.add_game()
        owners = self.run_async(GameService.list_owners())
        self.assertEqual([(o.id, o.name) for o in owners], [(self.owner_id, 'Owner One')])

    def test_nameless_owner_fails(self):
        nameless = self.add_owner('nameless')
        self.add_game(owner_id=nameless)
        with self.assertRaises(EnrichmentError):
            self.run_async(GameService.list_owners())


if __name__ == '__main__':
    unittest.main()
