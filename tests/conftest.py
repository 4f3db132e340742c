"""Shared fixtures: small CSV data sets written to a temp directory."""
import pandas as pd
import pytest
from shapely.geometry import Point

from church_atlas.app import create_app
from church_atlas.categories import MIRACLES, POPES, SAINTS
from church_atlas.features import Feature


def blank_record(fields, **values):
    record = {field: '' for field in fields}
    record.update(values)
    return record


def pope(**values):
    return blank_record(POPES.fields, **values)


def saint(**values):
    return blank_record(SAINTS.fields, **values)


def miracle(**values):
    return blank_record(MIRACLES.fields, **values)


def write_csv(path, fields, records):
    pd.DataFrame(records, columns=list(fields)).to_csv(path, index=False)


def write_data_dir(directory, popes=(), saints=(), miracles=()):
    write_csv(directory / POPES.csv_file, POPES.fields, list(popes))
    write_csv(directory / SAINTS.csv_file, SAINTS.fields, list(saints))
    write_csv(directory / MIRACLES.csv_file, MIRACLES.fields, list(miracles))
    return directory


def make_feature(lon, lat, category='saints', i=0, **properties):
    return Feature(id=f'{category}-{i}', category=category, point=Point(lon, lat),
                   properties=properties)


@pytest.fixture
def popes_rows():
    return [
        pope(**{'Papal Name': 'Pope Francis', 'Actual Name': 'Jorge Mario Bergoglio',
                'Pope Number': '266', 'Country': 'Argentina', 'Birthday2': '1936-12-17',
                'Latitude': '-34.6037', 'Longitude': '-58.3816'}),
        pope(**{'Papal Name': 'Pope John Paul II', 'Actual Name': 'Karol Wojtyla',
                'Country': 'Poland', 'Birthday2': '1920-05-18',
                'Latitude': '49.8833', 'Longitude': '19.4933'}),
    ]


@pytest.fixture
def saints_rows():
    return [
        saint(Name='Francis of Assisi', Country='Italy', **{'Born Location': 'Assisi'},
              Feast='10.4', Latitude='43.0707', Longitude='12.6196'),
        saint(Name='Clare of Assisi', Country='Italy', **{'Born Location': 'Assisi'},
              Feast='8.11', Latitude='43.0707', Longitude='12.6196'),
        saint(Name='Teresa of Avila', Country='Spain', **{'Born Location': 'Avila'},
              Feast='10.15', Latitude='40.6566', Longitude='-4.6818'),
        saint(Name='Unmapped Saint', Country='Nowhere', Latitude='', Longitude='abc'),
    ]


@pytest.fixture
def miracles_rows():
    return [
        miracle(Summary='Apparitions at Lourdes', Location='Lourdes', Country2='France',
                Date='1858-02-11', Latitude='43.0947', Longitude='-0.0459'),
        miracle(Summary='Apparitions at Lourdes (second account)', Location='Lourdes',
                Country2='France', Latitude='43.0947', Longitude='-0.0459'),
    ]


@pytest.fixture
def data_dir(tmp_path, popes_rows, saints_rows, miracles_rows):
    return write_data_dir(tmp_path, popes_rows, saints_rows, miracles_rows)


@pytest.fixture
def app(data_dir):
    app = create_app(data_dir)
    app.config['TESTING'] = True
    return app


@pytest.fixture
def client(app):
    return app.test_client()
