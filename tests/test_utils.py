"""
Unit tests for utility modules (row_utils, date_utils, validators, exceptions).
"""

from datetime import date, datetime, timedelta, timezone

import pytest
from dtable_sdk.schema.types import DateFormat
from dtable_sdk.utils.row_utils import (
    is_sequence,
    display_value_of,
    lookup_label,
    lookup_labels,
    cell_to_text,
    collect_headers
)
from dtable_sdk.utils.date_utils import parse_date_value, format_date
from dtable_sdk.utils.validators import (
    is_column_metadata,
    column_data,
    normalize_query_response
)
from dtable_sdk.utils.exceptions import (
    DTableError,
    SchemaMismatchError,
    InvalidQueryError,
    QueryNotFoundError,
    ResponseFormatError
)


class TestRowUtils:
    """Test cell helpers."""

    def test_is_sequence(self):
        """Test only lists and tuples count as sequences."""
        assert is_sequence([]) is True
        assert is_sequence(('a',)) is True
        assert is_sequence('abc') is False
        assert is_sequence(b'abc') is False
        assert is_sequence({'a': 1}) is False
        assert is_sequence(None) is False

    def test_display_value_of(self):
        """Test display value extraction."""
        assert display_value_of({'row_id': 'r1', 'display_value': 'Alice'}) == 'Alice'
        assert display_value_of({'row_id': 'r1'}) is None
        assert display_value_of('Bob') == 'Bob'

    def test_lookup_label(self):
        """Test option lookups."""
        options = {'o1': 'Done'}
        assert lookup_label('o1', options) == 'Done'
        assert lookup_label('o9', options) is None
        assert lookup_label(None, options) is None
        assert lookup_label(['o1'], options) is None

    def test_lookup_labels(self):
        """Test list lookups keep order and duplicates."""
        options = {'o1': 'A', 'o2': 'B'}
        assert lookup_labels(['o2', 'o1', 'o2'], options) == ['B', 'A', 'B']

    def test_cell_to_text(self):
        """Test text rendering of decoded cells."""
        assert cell_to_text(None) == ''
        assert cell_to_text(['A', 'B']) == 'A, B'
        assert cell_to_text(['A', None]) == 'A, '
        assert cell_to_text(True) == 'true'
        assert cell_to_text(3.5) == '3.5'

    def test_collect_headers(self):
        """Test headers are the union of keys in first-seen order."""
        rows = [{'_id': 'r1', 'Name': 'a'}, {'_id': 'r2', 'Age': 3, 'Name': 'b'}]
        assert collect_headers(rows) == ['_id', 'Name', 'Age']
        assert collect_headers([]) == []


class TestDateUtils:
    """Test date parsing and rendering."""

    def test_parse_iso_strings(self):
        """Test common ISO 8601 shapes."""
        assert parse_date_value('2021-03-04') == datetime(2021, 3, 4)
        assert parse_date_value('2021-03-04 10:20') == datetime(2021, 3, 4, 10, 20)
        assert parse_date_value('2021-03-04T10:20:30Z') == datetime(2021, 3, 4, 10, 20, 30, tzinfo=timezone.utc)

    def test_parse_objects_and_numbers(self):
        """Test datetime, date and epoch values."""
        dt = datetime(2020, 1, 2, 3, 4, 5)
        assert parse_date_value(dt) is dt
        assert parse_date_value(date(2020, 1, 2)) == datetime(2020, 1, 2)
        assert parse_date_value(0) == datetime(1970, 1, 1, tzinfo=timezone.utc)

    def test_parse_invalid(self):
        """Test values that aren't dates."""
        assert parse_date_value('') is None
        assert parse_date_value('not a date') is None
        assert parse_date_value(True) is None
        assert parse_date_value(['2021-03-04']) is None

    def test_format_date_patterns(self):
        """Test each supported pattern."""
        value = '2021-03-04T10:20:30Z'
        assert format_date(value, 'YYYY-MM-DD') == '2021-03-04'
        assert format_date(value, 'YYYY-MM-DD HH:mm') == '2021-03-04 10:20'
        assert format_date(value, 'YYYY-MM-DD HH:mm:ss') == '2021-03-04 10:20:30'

    def test_format_date_default_pattern(self):
        """Test missing and unknown patterns fall back."""
        value = '2021-03-04 10:20:30'
        assert format_date(value) == '2021-03-04'
        assert format_date(value, 'D/M/YYYY') == '2021-03-04'
        assert format_date(value, None, default_format=DateFormat.DATE_MINUTE) == '2021-03-04 10:20'

    def test_format_date_timezone(self):
        """Test aware values convert to the target timezone; naive ones don't."""
        plus_eight = timezone(timedelta(hours=8))
        assert format_date('2021-03-04T20:00:00Z', 'YYYY-MM-DD HH:mm', tz=plus_eight) == '2021-03-05 04:00'
        assert format_date('2021-03-04 20:00', 'YYYY-MM-DD HH:mm', tz=plus_eight) == '2021-03-04 20:00'

    def test_format_date_keeps_own_offset(self):
        """Test aware values render in their own offset without tz."""
        assert format_date('2021-03-04T23:30:00+08:00', 'YYYY-MM-DD HH:mm') == '2021-03-04 23:30'

    def test_format_date_unparseable(self):
        """Test unparseable values are returned unchanged."""
        value = {'not': 'a date'}
        assert format_date(value, 'YYYY-MM-DD') is value
        assert format_date('garbage') == 'garbage'


class TestValidators:
    """Test query response validators."""

    def test_is_column_metadata(self):
        """Test column entry checks."""
        assert is_column_metadata({'key': 'c1'}) is True
        assert is_column_metadata({'key': ''}) is False
        assert is_column_metadata({'name': 'x'}) is False
        assert is_column_metadata({'key': 5}) is False
        assert is_column_metadata('c1') is False
        assert is_column_metadata({'key': 'c1', 'name': ['Bad']}) is False
        assert is_column_metadata({'key': 'c1', 'name': None}) is True

    def test_column_data(self):
        """Test data payload defaults."""
        assert column_data({'data': {'format': 'YYYY-MM-DD'}}) == {'format': 'YYYY-MM-DD'}
        assert column_data({'data': None}) == {}
        assert column_data({'data': 'junk'}) == {}
        assert column_data({}) == {}

    def test_normalize_columns_rows(self):
        """Test the {columns, rows} shape."""
        columns, rows = normalize_query_response({'columns': [{'key': 'c1'}], 'rows': [{'_id': 'r1'}]})
        assert columns == [{'key': 'c1'}]
        assert rows == [{'_id': 'r1'}]

    def test_normalize_metadata_results(self):
        """Test the {metadata, results} shape."""
        columns, rows = normalize_query_response({'success': True, 'metadata': [{'key': 'c1'}], 'results': []})
        assert columns == [{'key': 'c1'}]
        assert rows == []

    def test_normalize_missing_parts(self):
        """Test missing or malformed parts become empty lists."""
        assert normalize_query_response({'rows': [{'_id': 'r1'}]}) == ([], [{'_id': 'r1'}])
        assert normalize_query_response({'columns': None, 'rows': 'junk'}) == ([], [])
        assert normalize_query_response({}) == ([], [])
        assert normalize_query_response(None) == ([], [])
        assert normalize_query_response([1, 2]) == ([], [])

    def test_normalize_returns_new_lists(self):
        """Test the response's own lists aren't returned."""
        response = {'columns': [], 'rows': []}
        columns, rows = normalize_query_response(response)
        assert columns is not response['columns']
        assert rows is not response['rows']


class TestExceptions:
    """Test custom exceptions."""

    def test_exception_hierarchy(self):
        """Test all exceptions inherit from DTableError."""
        assert issubclass(SchemaMismatchError, DTableError)
        assert issubclass(InvalidQueryError, DTableError)
        assert issubclass(QueryNotFoundError, DTableError)
        assert issubclass(ResponseFormatError, DTableError)

    def test_schema_mismatch_message(self):
        """Test SchemaMismatchError message."""
        error = SchemaMismatchError('c1', ['o1'], 'expected a single option id')
        assert str(error) == "Schema mismatch for column 'c1': expected a single option id (got list)"
        assert error.column_key == 'c1'

    def test_response_format_message(self):
        """Test ResponseFormatError includes the source when given."""
        assert str(ResponseFormatError('bad')) == 'Malformed query response: bad'
        assert str(ResponseFormatError('bad', 'x.json')) == 'Malformed query response: bad (x.json)'

    def test_query_errors(self):
        """Test query error messages."""
        assert 'select 1' in str(QueryNotFoundError('select 1'))
        with pytest.raises(DTableError):
            raise InvalidQueryError('', 'SQL must be a non-empty string')
