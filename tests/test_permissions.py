import unittest

from apiforge.core.exceptions import PermissionDenied
from apiforge.services.permissions import Identity, authorize, is_allowed, ownership_filter


class TestAuthorize(unittest.TestCase):
    def test_admin_always_allowed(self):
        self.assertTrue(is_allowed({}, "Admin", "delete"))
        authorize({"Admin": []}, "Admin", "delete")

    def test_granted_action(self):
        self.assertTrue(is_allowed({"Viewer": ["read"]}, "Viewer", "read"))
        self.assertFalse(is_allowed({"Viewer": ["read"]}, "Viewer", "update"))

    def test_wildcard(self):
        self.assertTrue(is_allowed({"Editor": ["all"]}, "Editor", "delete"))

    def test_unknown_role_denied(self):
        with self.assertRaises(PermissionDenied) as ctx:
            authorize({"Viewer": ["read"]}, "Intern", "read")
        self.assertIn("'read' permission", ctx.exception.message)

    def test_role_names_are_case_sensitive(self):
        self.assertFalse(is_allowed({"Viewer": ["read"]}, "viewer", "read"))
        self.assertFalse(is_allowed({}, "admin", "read"))


class TestOwnershipFilter(unittest.TestCase):
    def test_no_owner_field(self):
        self.assertIsNone(ownership_filter(None, Identity(id=1, role="Viewer")))

    def test_admin_bypasses(self):
        self.assertIsNone(ownership_filter("ownerId", Identity(id=1, role="Admin")))

    def test_other_roles_restricted_even_with_read_grant(self):
        self.assertEqual(ownership_filter("ownerId", Identity(id=5, role="Manager")), ("ownerId", 5))


if __name__ == "__main__":
    unittest.main()
