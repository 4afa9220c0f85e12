"""
Unit tests for data models.
"""

import unittest

from models import (
    DeploymentResult,
    InstanceTemplate,
    ManagedInstance,
    Operation,
    resource_name,
)


class TestInstanceTemplate(unittest.TestCase):
    """Test InstanceTemplate data model."""

    def setUp(self):
        self.data = {
            "kind": "compute#instanceTemplate",
            "id": "123",
            "name": "app-web-defaults",
            "selfLink": "https://www.googleapis.com/compute/v1/projects/p/global/instanceTemplates/app-web-defaults",
            "description": "web tier",
            "properties": {
                "disks": [
                    {
                        "boot": True,
                        "initializeParams": {
                            "sourceImage": "projects/p/global/images/myapp-0ld"
                        },
                    }
                ],
                "metadata": {"items": [{"key": "app_version", "value": "0ld"}]},
            },
        }

    def test_from_api(self):
        """Test parsing a template from the API representation."""
        template = InstanceTemplate.from_api(self.data)
        self.assertEqual(template.name, "app-web-defaults")
        self.assertTrue(template.self_link.endswith("/app-web-defaults"))
        self.assertEqual(template.description, "web tier")
        self.assertEqual(template.source_image, "projects/p/global/images/myapp-0ld")
        self.assertEqual(template.metadata_value("app_version"), "0ld")
        self.assertIsNone(template.metadata_value("missing"))

    def test_to_api_omits_output_only_fields(self):
        """Test the insert body only carries writable fields."""
        body = InstanceTemplate.from_api(self.data).to_api()
        self.assertEqual(set(body), {"name", "description", "properties"})

    def test_source_image_without_disks(self):
        """Test a template without disks has no source image."""
        template = InstanceTemplate(name="t-1", self_link="")
        self.assertEqual(template.source_image, "")


class TestOperation(unittest.TestCase):
    """Test Operation data model."""

    def test_zonal_operation(self):
        """Test zone URLs are shortened and the scope is zonal."""
        op = Operation.from_api(
            {
                "name": "operation-1",
                "status": "RUNNING",
                "progress": 40,
                "zone": "https://www.googleapis.com/compute/v1/projects/p/zones/europe-west1-b",
            }
        )
        self.assertEqual(op.zone, "europe-west1-b")
        self.assertEqual(op.scope, "zone")
        self.assertEqual(op.progress, 40)
        self.assertFalse(op.done)

    def test_regional_and_global_scope(self):
        """Test region scope and the global default."""
        regional = Operation.from_api(
            {"name": "op", "status": "DONE", "region": "projects/p/regions/europe-west1"}
        )
        self.assertEqual(regional.scope, "region")
        self.assertEqual(regional.region, "europe-west1")
        self.assertEqual(Operation(name="op", status="DONE").scope, "global")

    def test_errors(self):
        """Test an error payload marks the operation as failed."""
        op = Operation.from_api(
            {
                "name": "op",
                "status": "DONE",
                "error": {"errors": [{"code": "QUOTA_EXCEEDED", "message": "quota"}]},
            }
        )
        self.assertTrue(op.done)
        self.assertTrue(op.failed)
        self.assertFalse(Operation(name="op", status="DONE").failed)


class TestManagedInstance(unittest.TestCase):
    """Test ManagedInstance data model."""

    def test_from_api_defaults_action(self):
        """Test a missing currentAction defaults to NONE."""
        member = ManagedInstance.from_api(
            {
                "instance": "https://x/zones/europe-west1-b/instances/web-1",
                "instanceStatus": "RUNNING",
            }
        )
        self.assertEqual(member.current_action, "NONE")
        self.assertEqual(member.short_name, "web-1")

    def test_resource_name(self):
        self.assertEqual(resource_name("https://x/zones/europe-west1-b/"), "europe-west1-b")
        self.assertEqual(resource_name(None), "")


class TestDeploymentResult(unittest.TestCase):
    """Test DeploymentResult data model."""

    def test_defaults(self):
        result = DeploymentResult(project_id="p", group="web-group", version="abc123")
        self.assertFalse(result.template_created)
        self.assertEqual(result.recreated, 0)
        self.assertIsNone(result.duration_seconds)


if __name__ == "__main__":
    unittest.main()
