import unittest

from sqlalchemy import inspect, text

from support import unique_name

from apiforge.core.exceptions import ValidationError
from apiforge.db.session import SessionLocal, engine
from apiforge.schemas.schemas import FieldSpec, ModelDefinition, ModelDefinitionIn
from apiforge.services.definition_validator import validate_definition
from apiforge.services.table_synthesizer import table_synthesizer


def _definition(name, owner_field=None):
    return validate_definition(ModelDefinitionIn.model_validate({
        "name": name,
        "fields": [
            {"name": "title", "type": "string", "required": True, "unique": True},
            {"name": "notes", "type": "text", "default": "n/a"},
            {"name": "done", "type": "boolean", "default": False},
            {"name": "meta", "type": "json"},
        ],
        "ownerField": owner_field,
    }))


class TestBuildCreateTableSql(unittest.TestCase):
    def test_postgres_ddl(self):
        sql = table_synthesizer.build_create_table_sql(_definition("Task", "ownerId"))
        self.assertTrue(sql.startswith('CREATE TABLE IF NOT EXISTS "tasks" ('))
        self.assertIn("id SERIAL PRIMARY KEY", sql)
        self.assertIn("created_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP", sql)
        self.assertIn('"title" VARCHAR(255) NOT NULL UNIQUE', sql)
        self.assertIn("\"notes\" TEXT DEFAULT 'n/a'", sql)
        self.assertIn('"done" BOOLEAN DEFAULT FALSE', sql)
        self.assertIn('"meta" JSONB', sql)
        self.assertIn('"ownerId" INTEGER REFERENCES users(id)', sql)

    def test_sqlite_ddl(self):
        sql = table_synthesizer.build_create_table_sql(_definition("Task"), "sqlite")
        self.assertIn("id INTEGER PRIMARY KEY AUTOINCREMENT", sql)
        self.assertIn('"meta" JSON', sql)
        self.assertNotIn("REFERENCES", sql)

    def test_identifiers_are_revalidated(self):
        tampered = ModelDefinition(
            name="Task",
            fields=[FieldSpec(name='title" TEXT); DROP TABLE users; --', type="string")],
        )
        with self.assertRaises(ValidationError):
            table_synthesizer.build_create_table_sql(tampered)

    def test_tampered_model_name_is_rejected(self):
        with self.assertRaises(ValidationError):
            table_synthesizer.build_create_table_sql(ModelDefinition(name="users; --", fields=[]))


class TestCreateTable(unittest.TestCase):
    def test_create_is_idempotent_and_reports_creation(self):
        definition = _definition(unique_name("Note"), "ownerId")
        db = SessionLocal()
        try:
            first = table_synthesizer.create_table(db, definition)
            second = table_synthesizer.create_table(db, definition)
            self.assertEqual(first.table_name, definition.table_name)
            self.assertTrue(first.created)
            self.assertFalse(second.created)

            columns = [c["name"] for c in inspect(engine).get_columns(definition.table_name)]
            self.assertEqual(columns, ["id", "created_at", "updated_at", "title", "notes", "done", "meta", "ownerId"])
        finally:
            table_synthesizer.drop_table(db, definition.table_name)
            db.close()

    def test_changed_definition_does_not_retrofit_columns(self):
        name = unique_name("Memo")
        original = _definition(name)
        db = SessionLocal()
        try:
            table_synthesizer.create_table(db, original)
            changed = original.model_copy(update={
                "fields": original.fields + [FieldSpec(name="extra", type="integer")],
            })
            result = table_synthesizer.create_table(db, changed)
            self.assertFalse(result.created)
            columns = [c["name"] for c in inspect(engine).get_columns(original.table_name)]
            self.assertNotIn("extra", columns)
        finally:
            table_synthesizer.drop_table(db, original.table_name)
            db.close()

    def test_defaults_apply_in_the_store(self):
        definition = _definition(unique_name("Todo"))
        db = SessionLocal()
        try:
            table_synthesizer.create_table(db, definition)
            db.execute(text(f'INSERT INTO "{definition.table_name}" ("title") VALUES (:t)'), {"t": "a"})
            db.commit()
            row = db.execute(text(f'SELECT "notes", "done" FROM "{definition.table_name}"')).mappings().one()
            self.assertEqual(row["notes"], "n/a")
            self.assertFalse(row["done"])
        finally:
            table_synthesizer.drop_table(db, definition.table_name)
            db.close()


if __name__ == "__main__":
    unittest.main()
