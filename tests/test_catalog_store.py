#!/usr/bin/env python3
"""
Tests for catalog store queries against a temporary SQLite database.

Run with:
    python -m pytest tests/test_catalog_store.py
"""
import random
import unittest

from catalog_fixtures import TmpCatalogMixin

from game_catalog_api.app.core.config import settings
from game_catalog_api.app.core.errors import NotFoundError, StoreError
from game_catalog_api.app.services.catalog_store import CatalogStore
from game_catalog_api.app.services.filter_compiler import ALL_GAMES, GamePredicate, compile_filter


class TestQueryGames(TmpCatalogMixin):

    def _names(self, flt):
        rows = self.run_async(CatalogStore.query_games(compile_filter(flt)))
        return [row['name'] for row in rows]

    def test_empty_filter_matches_every_game(self):
        for i in range(5):
            self.add_game(f'Game {i}')
        self.assertEqual(len(self._names({})), 5)
        self.assertEqual(len(self.run_async(CatalogStore.query_games(ALL_GAMES))), 5)

    def test_empty_catalog(self):
        self.assertEqual(self._names({}), [])

    def test_reversed_date_range_matches_nothing(self):
        self.add_game('Old', date_released='2000-01-01 00:00:00')
        self.add_game('New', date_released='2022-01-01 00:00:00')
        self.assertEqual(
            self._names({'releaseAfter': '2023-01-01T00:00:00Z', 'releaseBefore': '1999-01-01T00:00:00Z'}),
            [],
        )

    def test_date_range_inclusive_on_both_ends(self):
        self.add_game('Start', date_released='2020-01-01 00:00:00')
        self.add_game('Inside', date_released='2020-06-15 12:00:00')
        self.add_game('End', date_released='2020-12-31 00:00:00')
        self.add_game('Outside', date_released='2021-01-01 00:00:00')
        self.assertEqual(
            self._names({'releaseAfter': '2020-01-01T00:00:00Z', 'releaseBefore': '2020-12-31T00:00:00Z'}),
            ['Start', 'Inside', 'End'],
        )

    def test_single_date_bounds(self):
        self.add_game('Old', date_released='2000-01-01 00:00:00')
        self.add_game('New', date_released='2022-01-01 00:00:00')
        self.assertEqual(self._names({'releaseAfter': '2010-01-01T00:00:00Z'}), ['New'])
        self.assertEqual(self._names({'releaseBefore': '2010-01-01T00:00:00Z'}), ['Old'])
        self.assertEqual(self._names({'releaseBefore': '2000-01-01T00:00:00Z'}), ['Old'])

    def test_sub_second_lower_bound_excludes_earlier_second(self):
        self.add_game('Earlier', date_released='2023-04-13 10:00:00')
        self.add_game('Later', date_released='2023-04-13 10:00:01')
        self.assertEqual(self._names({'releaseAfter': '2023-04-13T10:00:00.500Z'}), ['Later'])
        self.assertEqual(self._names({'releaseBefore': '2023-04-13T10:00:00.500Z'}), ['Earlier'])

    def test_sub_second_range_within_one_second_matches_nothing(self):
        self.add_game('Earlier', date_released='2023-04-13 10:00:00')
        self.assertEqual(
            self._names({'releaseAfter': '2023-04-13T10:00:00.300Z', 'releaseBefore': '2023-04-13T10:00:00.700Z'}),
            [],
        )

    def test_player_count_within_range(self):
        self.add_game('Wide', player_min=2, player_max=6)
        self.add_game('Exactly five', player_min=5, player_max=5)
        self.add_game('Small', player_min=1, player_max=3)
        self.assertEqual(self._names({'playerCount': 4}), ['Wide'])
        self.assertEqual(self._names({'playerCount': 5}), ['Wide', 'Exactly five'])
        self.assertEqual(self._names({'playerCount': 2}), ['Wide', 'Small'])

    def test_name_and_location_substrings_ignore_case(self):
        self.add_game('Settlers of Catan', location='Hubben')
        self.add_game('Catan Jr', location='Basement')
        self.add_game('Portal 2', location='Hubben')
        self.assertEqual(self._names({'name': 'Catan', 'location': 'hub'}), ['Settlers of Catan'])
        self.assertEqual(self._names({'name': 'catan'}), ['Settlers of Catan', 'Catan Jr'])

    def test_non_ascii_substring_ignores_case(self):
        self.add_game('Ärtan Äventyr', location='Källaren')
        self.assertEqual(self._names({'name': 'äventyr', 'location': 'KÄLL'}), ['Ärtan Äventyr'])

    def test_platform_is_exact(self):
        self.add_platform('Steam')
        self.add_platform('Steam Deck')
        self.add_game('A', platform_name='Steam')
        self.add_game('B', platform_name='Steam Deck')
        self.assertEqual(self._names({'platform': 'Steam'}), ['A'])
        self.assertEqual(self._names({'platform': 'Nonexistent'}), [])

    def test_playtime_bounds(self):
        self.add_game('Short', playtime_minutes=15)
        self.add_game('Medium', playtime_minutes=60)
        self.add_game('Long', playtime_minutes=240)
        self.assertEqual(self._names({'playtimeMin': 60}), ['Medium', 'Long'])
        self.assertEqual(self._names({'playtimeMax': 60}), ['Short', 'Medium'])
        self.assertEqual(self._names({'playtimeMin': 16, 'playtimeMax': 239}), ['Medium'])
        self.assertEqual(self._names({'playtimeMin': 100, 'playtimeMax': 10}), [])

    def test_owner_exact(self):
        other = self.add_owner('other-cid', 'Other')
        self.add_game('Mine')
        self.add_game('Theirs', owner_id=other)
        self.assertEqual(self._names({'owner': other}), ['Theirs'])
        self.assertEqual(self._names({'owner': 9999}), [])

    def test_predicates_are_and_combined(self):
        self.add_game('Catan', location='Hubben', playtime_minutes=90)
        self.add_game('Catan Quick', location='Hubben', playtime_minutes=20)
        self.assertEqual(self._names({'name': 'catan', 'playtimeMin': 60}), ['Catan'])

    def test_rows_carry_platform_and_owner(self):
        game_id = self.add_game('Catan')
        row = self.run_async(CatalogStore.query_games(GamePredicate.name_search('catan')))[0]
        self.assertEqual(row['id'], game_id)
        self.assertEqual(row['platform_name'], 'Board game')
        self.assertEqual(row['owner_id'], self.owner_id)
        self.assertNotIn('platform', row)


class TestPlayMarks(TmpCatalogMixin):

    def test_empty_batch(self):
        account = self.add_account('user')
        self.assertEqual(self.run_async(CatalogStore.play_marks_for(account, [])), set())

    def test_single_game(self):
        account = self.add_account('user')
        game = self.add_game()
        self.assertEqual(self.run_async(CatalogStore.play_marks_for(account, [game])), set())
        self.add_play_mark(game, account)
        self.assertEqual(self.run_async(CatalogStore.play_marks_for(account, [game])), {game})

    def test_large_batch_marks_exactly_subset(self):
        account = self.add_account('user')
        other = self.add_account('other')
        game_ids = self.add_many_games(1000)
        played = set(game_ids[::7])
        for game_id in played:
            self.add_play_mark(game_id, account)
        for game_id in game_ids[1::7]:
            self.add_play_mark(game_id, other)
        shuffled = list(game_ids)
        random.Random(42).shuffle(shuffled)
        self.assertEqual(self.run_async(CatalogStore.play_marks_for(account, shuffled)), played)

    def test_only_requested_ids_returned(self):
        account = self.add_account('user')
        first, second = self.add_game('A'), self.add_game('B')
        self.add_play_mark(first, account)
        self.add_play_mark(second, account)
        self.assertEqual(self.run_async(CatalogStore.play_marks_for(account, [second])), {second})

    def test_add_and_remove_mark(self):
        account = self.add_account('user')
        game = self.add_game()
        self.assertTrue(self.run_async(CatalogStore.add_play_mark(game, account)))
        self.assertFalse(self.run_async(CatalogStore.add_play_mark(game, account)))
        self.assertTrue(self.run_async(CatalogStore.remove_play_mark(game, account)))
        self.assertFalse(self.run_async(CatalogStore.remove_play_mark(game, account)))


class TestOwners(TmpCatalogMixin):

    def test_owner_name(self):
        self.assertEqual(self.run_async(CatalogStore.owner_name(self.owner_id)), 'Owner One')

    def test_unknown_owner_raises(self):
        with self.assertRaises(NotFoundError):
            self.run_async(CatalogStore.owner_name(12345))

    def test_owner_without_name_raises(self):
        nameless = self.add_owner('nameless')
        with self.assertRaises(NotFoundError):
            self.run_async(CatalogStore.owner_name(nameless))

    def test_owners_with_games_only(self):
        self.add_owner('idle', 'Idle Owner')
        self.add_game()
        owners = self.run_async(CatalogStore.owners_with_games())
        self.assertEqual(owners, [{'id': self.owner_id, 'name': 'Owner One'}])


class TestStoreFailure(TmpCatalogMixin):

    def test_unreachable_database_raises_store_error(self):
        # A directory cannot be opened as a database file.
        settings.database_url = self.tmp
        with self.assertRaises(StoreError):
            self.run_async(CatalogStore.query_games(ALL_GAMES))

    def test_empty_interval_skips_store(self):
        settings.database_url = self.tmp
        predicate = compile_filter({'releaseAfter': '2021-01-01T00:00:00Z', 'releaseBefore': '2020-01-01T00:00:00Z'})
        self.assertEqual(self.run_async(CatalogStore.query_games(predicate)), [])


if __name__ == '__main__':
    unittest.main()
