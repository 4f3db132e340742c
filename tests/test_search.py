"""
Test saints filtering and list search

Validates OR semantics with vacuous-true empty clauses, page arithmetic,
and out-of-range pages.
"""
import math

import pandas as pd
import pytest

from church_atlas.categories import MIRACLES, POPES, SAINTS
from church_atlas.search import filter_saints, parse_page, search_records

from conftest import miracle, pope, saint


def saints_frame(records):
    return pd.DataFrame(records, columns=list(SAINTS.fields))


@pytest.fixture
def many_saints():
    return saints_frame([saint(Name=f'Saint {i}', Country='Italy') for i in range(250)])


class TestFilterSaints:

    def test_empty_query_returns_first_page(self, many_saints):
        result = filter_saints(many_saints, name='', country='', born='')
        assert len(result['saints']) == 100
        assert result['pagination'] == {'total': 250, 'totalPages': 3, 'currentPage': 1, 'limit': 100}

    @pytest.mark.parametrize('page, expected', [(1, 100), (2, 100), (3, 50), (4, 0), (10, 0)])
    def test_page_lengths(self, many_saints, page, expected):
        result = filter_saints(many_saints, page=page)
        total = result['pagination']['total']
        assert len(result['saints']) == expected == max(0, min(100, total - 100 * (page - 1)))
        assert result['pagination']['totalPages'] == math.ceil(total / 100)

    def test_out_of_range_page_keeps_totals(self, many_saints):
        in_range = filter_saints(many_saints, page=1)['pagination']
        beyond = filter_saints(many_saints, page=99)
        assert beyond['saints'] == []
        assert beyond['pagination']['total'] == in_range['total']
        assert beyond['pagination']['totalPages'] == in_range['totalPages']
        assert beyond['pagination']['currentPage'] == 99

    def test_load_order_is_kept(self, many_saints):
        names = [s['Name'] for s in filter_saints(many_saints, page=2)['saints']]
        assert names == [f'Saint {i}' for i in range(100, 200)]

    def test_clauses_are_ored(self):
        frame = saints_frame([
            saint(Name='Rose of Lima', Country='Peru', **{'Born Location': 'Lima'}),
            saint(Name='Martin de Porres', Country='Peru', **{'Born Location': 'Lima'}),
            saint(Name='Francis', Country='Italy', **{'Born Location': 'Assisi'}),
        ])
        result = filter_saints(frame, name='rose', country='italy', born='zzz')
        assert [s['Name'] for s in result['saints']] == ['Rose of Lima', 'Francis']

    def test_case_insensitive_same_text_in_every_field(self):
        frame = saints_frame([
            saint(Name='Teresa', Country='Spain', **{'Born Location': 'Avila'}),
            saint(Name='Ignatius', Country='Spain', **{'Born Location': 'Loyola'}),
            saint(Name='Francis', Country='Italy', **{'Born Location': 'Assisi'}),
        ])
        result = filter_saints(frame, name='AVILA', country='AVILA', born='AVILA')
        assert [s['Name'] for s in result['saints']] == ['Teresa']

    def test_one_empty_clause_matches_everything(self):
        frame = saints_frame([saint(Name='Francis'), saint(Name='Clare')])
        result = filter_saints(frame, name='nobody', country='', born='nowhere')
        assert result['pagination']['total'] == 2

    def test_none_treated_as_empty(self):
        frame = saints_frame([saint(Name='Francis')])
        assert filter_saints(frame, name=None, country=None, born=None)['pagination']['total'] == 1

    def test_empty_data(self):
        result = filter_saints(saints_frame([]), name='x', country='x', born='x')
        assert result == {'saints': [], 'pagination': {'total': 0, 'totalPages': 0, 'currentPage': 1, 'limit': 100}}


class TestParsePage:

    @pytest.mark.parametrize('raw, expected', [
        (None, 1), ('', 1), ('abc', 1), ('0', 1), ('-3', 1), ('1', 1), ('4', 4), (7, 7),
    ])
    def test_parse_page(self, raw, expected):
        assert parse_page(raw) == expected


class TestSearchRecords:

    def test_pope_fields(self):
        frame = pd.DataFrame([
            pope(**{'Papal Name': 'Pope Francis', 'Country': 'Argentina'}),
            pope(**{'Papal Name': 'Pope Benedict XVI', 'Birth Place': 'Marktl'}),
            pope(**{'Papal Name': 'Pope John Paul II', 'Actual Name': 'Karol Wojtyla'}),
        ], columns=list(POPES.fields))
        assert [p['Papal Name'] for p in search_records(frame, 'popes', 'ARGENT')] == ['Pope Francis']
        assert [p['Papal Name'] for p in search_records(frame, 'popes', 'marktl')] == ['Pope Benedict XVI']
        assert [p['Papal Name'] for p in search_records(frame, 'popes', 'karol')] == ['Pope John Paul II']

    def test_miracle_fields(self):
        frame = pd.DataFrame([
            miracle(Summary='Miracle of the Sun', Country2='Portugal', Location='Fatima'),
            miracle(Summary='Apparitions', Country2='France', Location='Lourdes'),
        ], columns=list(MIRACLES.fields))
        assert [m['Location'] for m in search_records(frame, 'miracles', 'portugal')] == ['Fatima']
        assert [m['Location'] for m in search_records(frame, 'miracles', 'lourdes')] == ['Lourdes']

    def test_empty_query_skips_records_without_searchable_text(self):
        frame = pd.DataFrame([
            miracle(Summary='Apparitions'),
            miracle(Latitude='1', Longitude='1'),
        ], columns=list(MIRACLES.fields))
        assert len(search_records(frame, 'miracles', '')) == 1
