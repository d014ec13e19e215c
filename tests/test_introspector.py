import os
import sqlite3
import pytest

from core.errors import ConnectionError, SchemaError
from core.introspector import SchemaIntrospector
from extensions.plugins.sqlite_adapter import SQLiteSource

class TestListTables:

    def test_lists_user_tables_sorted(self, shop_source):
        tables = SchemaIntrospector(shop_source).list_tables()
        assert tables == ['customers', 'order_lines', 'orders']

    def test_include_and_exclude(self, shop_source):
        introspector = SchemaIntrospector(shop_source)
        assert introspector.list_tables(include=['orders', 'customers']) == ['customers', 'orders']
        assert introspector.list_tables(exclude=['orders']) == ['customers', 'order_lines']
        # Exclusion wins over inclusion
        assert introspector.list_tables(include=['orders'], exclude=['orders']) == []

    def test_missing_include_is_warned_not_fatal(self, shop_source, caplog):
        tables = SchemaIntrospector(shop_source).list_tables(include=['customers', 'ghosts'])
        assert tables == ['customers']
        assert 'ghosts' in caplog.text

    def test_internal_tables_hidden(self, make_sqlite):
        source = make_sqlite("""
            CREATE TABLE things (id INTEGER PRIMARY KEY AUTOINCREMENT, label TEXT);
            INSERT INTO things (label) VALUES ('x');
        """)
        # AUTOINCREMENT creates sqlite_sequence
        assert SchemaIntrospector(source).list_tables() == ['things']

class TestDescribeTable:

    def test_columns(self, shop_source):
        table = SchemaIntrospector(shop_source).describe_table('customers')
        assert table.column_names == ['id', 'email', 'name', 'vip', 'joined']

        email = table.get_column('email')
        assert email.raw_type == 'VARCHAR(120)'
        assert email.nullable is False

        name = table.get_column('name')
        assert name.default == "'anonymous'"
        assert name.nullable is True

        assert table.get_column('joined').default == 'CURRENT_TIMESTAMP'
        assert table.primary_key == ['id']

    def test_composite_primary_key_order(self, make_sqlite):
        source = make_sqlite("CREATE TABLE pairs (b TEXT, a TEXT, PRIMARY KEY (a, b));")
        table = SchemaIntrospector(source).describe_table('pairs')
        assert table.primary_key == ['a', 'b']
        # The key's own index is not reported as a separate unique index
        assert table.unique_indexes == []

    def test_unique_indexes(self, shop_source):
        table = SchemaIntrospector(shop_source).describe_table('customers')
        unique = table.unique_indexes
        assert [idx.name for idx in unique] == ['idx_customers_email']
        assert unique[0].columns == ('email',)
        assert len(table.indexes) == 2

    def test_foreign_keys_grouped_by_id(self, make_sqlite):
        source = make_sqlite("""
            CREATE TABLE parent (a INTEGER, b INTEGER, PRIMARY KEY (a, b));
            CREATE TABLE owner (id INTEGER PRIMARY KEY);
            CREATE TABLE child (
                id INTEGER PRIMARY KEY,
                pa INTEGER,
                pb INTEGER,
                owner_id INTEGER REFERENCES owner,
                FOREIGN KEY (pa, pb) REFERENCES parent (a, b) ON UPDATE CASCADE ON DELETE RESTRICT
            );
        """)
        table = SchemaIntrospector(source).describe_table('child')
        groups = {fk.ref_table: fk for fk in table.foreign_keys}
        assert len(groups) == 2

        composite = groups['parent']
        assert composite.columns == ('pa', 'pb')
        assert composite.ref_columns == ('a', 'b')
        assert composite.on_update == 'CASCADE'
        assert composite.on_delete == 'NO ACTION'

        implicit = groups['owner']
        assert implicit.columns == ('owner_id',)
        assert implicit.references_primary_key

    def test_missing_table(self, shop_source):
        with pytest.raises(SchemaError):
            SchemaIntrospector(shop_source).describe_table('nope')

class TestSQLiteSource:

    def test_missing_file(self, temp_dir):
        with pytest.raises(ConnectionError):
            SQLiteSource(os.path.join(temp_dir, 'absent.sqlite'))

    def test_not_a_database(self, temp_dir):
        path = os.path.join(temp_dir, 'junk.sqlite')
        with open(path, 'wb') as f:
            f.write(b'this is not a sqlite file' * 100)
        with pytest.raises(ConnectionError):
            SQLiteSource(path)

    def test_source_is_read_only(self, shop_source):
        with pytest.raises(sqlite3.OperationalError):
            shop_source._connection.execute("DELETE FROM customers")

    def test_pages(self, shop_source):
        assert shop_source.count_rows('customers') == 2
        first = shop_source.fetch_page('customers', 1, 0)
        second = shop_source.fetch_page('customers', 1, 1)
        assert [row['id'] for row in first + second] == [1, 2]
        assert shop_source.fetch_page('customers', 5, 2) == []
