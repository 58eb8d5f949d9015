"""Tests for platform contexts."""

from osbapi_broker.models.context import (
    Context, ContextKind, cluster_id, instance_name, namespace,
    organization_guid, organization_name, space_guid, space_name
)


class TestContext:
    """Test context parsing and helpers."""

    def test_flat_wire_form(self):
        """Test the flat JSON form is split into platform and properties."""
        context = Context.model_validate({
            "platform": "cloudfoundry",
            "organization_guid": "org-1",
            "space_guid": "space-1"
        })

        assert context.platform == "cloudfoundry"
        assert context.properties == {"organization_guid": "org-1", "space_guid": "space-1"}
        assert context.kind is ContextKind.CLOUD_FOUNDRY

    def test_serializes_flat(self):
        """Test the context is serialized back to the flat form."""
        context = Context.of("kubernetes", {"namespace": "default"})

        assert context.model_dump() == {"platform": "kubernetes", "namespace": "default"}

    def test_cloud_foundry_helpers(self):
        """Test Cloud Foundry accessors."""
        context = Context.model_validate({
            "platform": "cloudfoundry",
            "organizationGuid": "org-1",
            "organization_name": "org",
            "space_guid": "space-1",
            "space_name": "dev",
            "instance_name": "my-db"
        })

        assert organization_guid(context) == "org-1"
        assert organization_name(context) == "org"
        assert space_guid(context) == "space-1"
        assert space_name(context) == "dev"
        assert instance_name(context) == "my-db"
        assert namespace(context) is None

    def test_kubernetes_helpers(self):
        """Test Kubernetes accessors."""
        context = Context.model_validate({
            "platform": "kubernetes",
            "namespace": "team-a",
            "clusterid": "cluster-1",
            "instance_name": "cache"
        })

        assert context.kind is ContextKind.KUBERNETES
        assert namespace(context) == "team-a"
        assert cluster_id(context) == "cluster-1"
        assert instance_name(context) == "cache"
        assert organization_guid(context) is None

    def test_generic_platform(self):
        """Test other platforms keep their properties without typed accessors."""
        context = Context.model_validate({"platform": "test-platform", "namespace": "x"})

        assert context.kind is ContextKind.GENERIC
        assert context.get_property("namespace") == "x"
        assert context.get_property("missing", "default") == "default"
        assert namespace(context) is None

    def test_helpers_accept_none(self):
        """Test accessors return None without a context."""
        assert organization_guid(None) is None
        assert cluster_id(None) is None

    def test_properties_key_stays_a_property(self):
        """Test a wire property named properties is kept in the bag unchanged."""
        data = {"platform": "test-platform", "properties": {"tier": "gold"}}

        context = Context.model_validate(data)

        assert context.platform == "test-platform"
        assert context.properties == {"properties": {"tier": "gold"}}
        assert context.model_dump() == data

    def test_of(self):
        """Test building a context from a platform and its properties."""
        context = Context.of("cloudfoundry", {"space_guid": "space-1"})

        assert context.kind is ContextKind.CLOUD_FOUNDRY
        assert space_guid(context) == "space-1"
        assert Context.of("other").properties == {}
