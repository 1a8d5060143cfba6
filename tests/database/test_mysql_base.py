from __future__ import annotations

import mysql.connector
import pytest

from src.academy_attendance.academy_attendance.core.exceptions import RemoteWriteError
from src.academy_attendance.academy_attendance.database.mysql_base import db_cursor, db_transaction


class _Cursor:
    def __init__(self, conn):
        self.conn = conn
        self.closed = False

    def execute(self, sql, params=None):
        self.conn.statements.append(sql)

    def close(self):
        self.closed = True


class _Conn:
    def __init__(self):
        self.statements = []
        self.commits = 0
        self.rollbacks = 0
        self.closed = False

    def cursor(self, dictionary=True):
        return _Cursor(self)

    def commit(self):
        self.commits += 1

    def rollback(self):
        self.rollbacks += 1

    def close(self):
        self.closed = True


class _Factory:
    """Same surface as DatabaseConnection, without a server."""

    def __init__(self):
        self.shared = None
        self.opened: list[_Conn] = []

    def connect(self):
        conn = _Conn()
        self.opened.append(conn)
        return conn


def test_each_cursor_block_is_its_own_transaction():
    factory = _Factory()
    with db_cursor(factory) as (_, cur):
        cur.execute("INSERT 1")
    with db_cursor(factory) as (_, cur):
        cur.execute("INSERT 2")

    assert [c.commits for c in factory.opened] == [1, 1]
    assert all(c.closed for c in factory.opened)


def test_transaction_shares_one_connection_and_commits_once():
    factory = _Factory()
    with db_transaction(factory):
        with db_cursor(factory) as (_, cur):
            cur.execute("INSERT attendance")
        with db_cursor(factory) as (_, cur):
            cur.execute("INSERT check_in")
        with db_transaction(factory):
            with db_cursor(factory) as (_, cur):
                cur.execute("UPDATE check_in")

    [conn] = factory.opened
    assert conn.statements == ["INSERT attendance", "INSERT check_in", "UPDATE check_in"]
    assert (conn.commits, conn.rollbacks, conn.closed) == (1, 0, True)
    assert factory.shared is None


def test_store_error_inside_transaction_rolls_back_everything():
    factory = _Factory()
    with pytest.raises(RemoteWriteError):
        with db_transaction(factory):
            with db_cursor(factory) as (_, cur):
                cur.execute("INSERT attendance")
            with db_cursor(factory):
                raise mysql.connector.Error("lost connection")

    [conn] = factory.opened
    assert (conn.commits, conn.rollbacks) == (0, 1)
    assert factory.shared is None
