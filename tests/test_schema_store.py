import os
import tempfile
import unittest

from sqlalchemy import text
from sqlalchemy.exc import OperationalError

from support import make_user, unique_name

from apiforge.core.exceptions import DefinitionCorruption, ValidationError
from apiforge.db.session import SessionLocal
from apiforge.models.model_definition import ModelDefinitionRecord
from apiforge.schemas.schemas import ModelDefinitionIn
from apiforge.services.definition_validator import validate_definition
from apiforge.services.file_mirror import FileMirror
from apiforge.services.schema_store import SchemaStore, check_definitions, load_definition
from apiforge.services.table_synthesizer import table_synthesizer


def _definition(name):
    return validate_definition(ModelDefinitionIn.model_validate({
        "name": name,
        "fields": [
            {"name": "title", "type": "string", "required": True},
            {"name": "score", "type": "integer", "default": 1},
        ],
        "ownerField": "ownerId",
        "rbac": {"Viewer": ["read"], "Auditor": ["all"]},
    }))


class TestSchemaStore(unittest.TestCase):
    def setUp(self):
        self.mirror_dir = tempfile.mkdtemp(prefix="apiforge-mirror-")
        self.store = SchemaStore(mirror=FileMirror(self.mirror_dir))
        self.user_id, _ = make_user("Manager")
        self.db = SessionLocal()

    def tearDown(self):
        self.db.close()

    def _create(self, definition):
        table_synthesizer.create_table(self.db, definition)
        stored = self.store.persist(self.db, definition, self.user_id)
        self.store.write_mirror(definition)
        return stored

    def test_round_trip(self):
        definition = _definition(unique_name("Ticket"))
        stored = self._create(definition)
        try:
            self.assertEqual(stored.table_name, definition.table_name)
            fetched = self.store.get_by_name(self.db, definition.name)
            self.assertIsNotNone(fetched)
            self.assertEqual(fetched.definition, definition)
            self.assertFalse(fetched.degraded)
            self.assertEqual(fetched.created_by, self.user_id)
            self.assertTrue(fetched.created_by_username.startswith("manager_"))
        finally:
            self.store.delete(self.db, definition.name)

    def test_duplicate_name_is_rejected(self):
        definition = _definition(unique_name("Ticket"))
        self._create(definition)
        try:
            with self.assertRaises(ValidationError):
                self.store.persist(self.db, definition, self.user_id)
        finally:
            self.store.delete(self.db, definition.name)

    def test_get_all_lists_newest_first(self):
        first = _definition(unique_name("Alpha"))
        second = _definition(unique_name("Beta"))
        self._create(first)
        self._create(second)
        try:
            names = [m.name for m in self.store.get_all(self.db)]
            self.assertLess(names.index(second.name), names.index(first.name))
        finally:
            self.store.delete(self.db, first.name)
            self.store.delete(self.db, second.name)

    def test_delete_drops_table_definition_and_mirror(self):
        definition = _definition(unique_name("Ticket"))
        self._create(definition)
        mirror_path = self.store.mirror.path_for(definition.name)
        self.assertTrue(os.path.exists(mirror_path))

        self.store.delete(self.db, definition.name)

        self.assertIsNone(self.store.get_by_name(self.db, definition.name))
        self.assertNotIn(definition.name, [m.name for m in self.store.get_all(self.db)])
        self.assertFalse(os.path.exists(mirror_path))
        with self.assertRaises(OperationalError):
            self.db.execute(text(f'SELECT * FROM "{definition.table_name}"'))
        self.db.rollback()

    def test_missing_mirror_does_not_block_delete(self):
        definition = _definition(unique_name("Ticket"))
        table_synthesizer.create_table(self.db, definition)
        self.store.persist(self.db, definition, self.user_id)
        self.store.delete(self.db, definition.name)
        self.assertIsNone(self.store.get_by_name(self.db, definition.name))

    def test_corrupted_definition_degrades_to_least_privilege(self):
        definition = _definition(unique_name("Ticket"))
        self._create(definition)
        try:
            self.db.query(ModelDefinitionRecord).filter(
                ModelDefinitionRecord.name == definition.name
            ).update({"definition_json": "{not json"})
            self.db.commit()

            fetched = self.store.get_by_name(self.db, definition.name)
            self.assertTrue(fetched.degraded)
            self.assertIsNotNone(fetched.degraded_reason)
            self.assertEqual(fetched.definition.fields, [])
            self.assertEqual(fetched.definition.rbac, {})
            self.assertIsNone(fetched.definition.owner_field)
            self.assertEqual(fetched.table_name, definition.table_name)

            report = {e["name"]: e for e in check_definitions(self.db)}
            self.assertFalse(report[definition.name]["valid"])
        finally:
            self.store.delete(self.db, definition.name)


class TestLoadDefinition(unittest.TestCase):
    def test_strict_parse_raises(self):
        with self.assertRaises(DefinitionCorruption):
            load_definition("[]")
        with self.assertRaises(DefinitionCorruption):
            load_definition('{"name": "Task", "fields": [{"name": "x", "type": "blob"}]}')

    def test_name_mismatch_is_corruption(self):
        with self.assertRaises(DefinitionCorruption):
            load_definition('{"name": "Other", "fields": []}', expected_name="Task")


if __name__ == "__main__":
    unittest.main()
