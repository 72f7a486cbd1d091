import unittest

from apiforge.core.exceptions import ValidationError
from apiforge.services.query_builder import QueryBuilder


class TestQueryBuilder(unittest.TestCase):
    def setUp(self):
        self.qb = QueryBuilder("tasks")

    def test_select_all_unrestricted(self):
        stmt = self.qb.select_all()
        self.assertEqual(stmt.sql, 'SELECT * FROM "tasks" ORDER BY created_at DESC, id DESC')
        self.assertEqual(stmt.params, {})

    def test_select_all_with_owner(self):
        stmt = self.qb.select_all(owner=("ownerId", 7))
        self.assertEqual(
            stmt.sql,
            'SELECT * FROM "tasks" WHERE "ownerId" = :p1 ORDER BY created_at DESC, id DESC',
        )
        self.assertEqual(stmt.params, {"p1": 7})

    def test_guard_select_numbers_owner_after_id(self):
        stmt = self.qb.select_one(3, owner=("ownerId", 7), columns="id")
        self.assertEqual(stmt.sql, 'SELECT id FROM "tasks" WHERE id = :p1 AND "ownerId" = :p2')
        self.assertEqual(stmt.params, {"p1": 3, "p2": 7})

    def test_insert_binds_values_in_order(self):
        stmt = self.qb.insert([("title", "X"), ("ownerId", 7)])
        self.assertEqual(
            stmt.sql,
            'INSERT INTO "tasks" (created_at, updated_at, "title", "ownerId") '
            "VALUES (CURRENT_TIMESTAMP, CURRENT_TIMESTAMP, :p1, :p2) RETURNING *",
        )
        self.assertEqual(stmt.params, {"p1": "X", "p2": 7})

    def test_update_keeps_id_first(self):
        stmt = self.qb.update(3, [("title", "Y"), ("done", True)])
        self.assertEqual(
            stmt.sql,
            'UPDATE "tasks" SET updated_at = CURRENT_TIMESTAMP, "title" = :p2, "done" = :p3 '
            "WHERE id = :p1 RETURNING *",
        )
        self.assertEqual(stmt.params, {"p1": 3, "p2": "Y", "p3": True})

    def test_update_with_no_fields_only_touches_timestamp(self):
        stmt = self.qb.update(3, [])
        self.assertIn("SET updated_at = CURRENT_TIMESTAMP WHERE id = :p1", stmt.sql)
        self.assertEqual(stmt.params, {"p1": 3})

    def test_delete(self):
        stmt = self.qb.delete(3)
        self.assertEqual(stmt.sql, 'DELETE FROM "tasks" WHERE id = :p1 RETURNING *')

    def test_values_are_never_interpolated(self):
        stmt = self.qb.insert([("title", "x'); DROP TABLE users; --")])
        self.assertNotIn("DROP", stmt.sql)

    def test_unsafe_identifiers_are_refused(self):
        with self.assertRaises(ValidationError):
            QueryBuilder('tasks"; DROP TABLE users; --')
        with self.assertRaises(ValidationError):
            self.qb.insert([('title" = 1 --', "X")])


if __name__ == "__main__":
    unittest.main()
