"""
Tests for the import_movements management command.
"""

from io import StringIO

import pytest
from django.core.management import call_command
from django.core.management.base import CommandError

from stockflow.models import Movement, StockRecord


pytestmark = pytest.mark.django_db


@pytest.fixture
def upload(tmp_path):
    def _write(text, name='batch.csv'):
        path = tmp_path / name
        path.write_text(text)
        return str(path)
    return _write


def run(*args):
    out, err = StringIO(), StringIO()
    call_command('import_movements', *args, stdout=out, stderr=err)
    return out.getvalue(), err.getvalue()


class TestValidateOnly:
    """Tests for dry runs."""

    def test_prints_lines_and_counts(self, catalog, upload):
        path = upload('SKU,Quantity\nSON-WH1000,5\nINVALID-SKU,1\nAPL-IP14P-256,30\n')

        out, _ = run(path, '--kind', 'outbound', '--channel', 'Amazon')

        assert 'Will leave low stock (Remaining: 3)' in out
        assert 'SKU not found in system' in out
        assert 'Insufficient stock (Available: 25, Requested: 30)' in out
        assert '0 valid, 1 warning(s), 2 error(s)' in out
        assert not Movement.objects.exists()

    def test_missing_context(self, catalog, upload):
        path = upload('SKU,Quantity\nSAM-S23-128,1\n')

        with pytest.raises(CommandError, match='INVALID_CONTEXT'):
            run(path, '--kind', 'inbound')

    def test_missing_file(self, catalog, tmp_path):
        with pytest.raises(CommandError, match='File not found'):
            run(str(tmp_path / 'nope.csv'), '--kind', 'inbound', '--category', 'SU')

    def test_format_errors_listed(self, catalog, upload):
        path = upload('SKU,Quantity\nSAM-S23-128,many\n')

        with pytest.raises(CommandError, match='INVALID_BATCH'):
            run(path, '--kind', 'inbound', '--category', 'SU')


class TestCommit:
    """Tests for --commit."""

    def test_commit_applies(self, catalog, upload):
        path = upload('SKU,Quantity\nSAM-S23-128,10\nINVALID-SKU,1\n')

        out, _ = run(path, '--kind', 'inbound', '--category', 'SU', '--commit', '--user', 'ops')

        assert '1 line(s) applied to 1 SKU(s)' in out
        assert StockRecord.objects.get(item__sku='SAM-S23-128').quantity == 55
        assert Movement.objects.get().username == 'ops'

    def test_commit_needs_user(self, catalog, upload):
        path = upload('SKU,Quantity\nSAM-S23-128,10\n')

        with pytest.raises(CommandError, match='--user'):
            run(path, '--kind', 'inbound', '--category', 'SU', '--commit')

        assert not Movement.objects.exists()

    def test_nothing_to_commit(self, catalog, upload):
        path = upload('SKU,Quantity\nINVALID-SKU,1\n')

        with pytest.raises(CommandError, match='ALL_LINES_REJECTED'):
            run(path, '--kind', 'inbound', '--category', 'SU', '--commit', '--user', 'ops')
