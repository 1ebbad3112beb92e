"""Tests for the role-based access policy."""

import pytest

from app.core.access_policy import (
    DEFAULT_POLICY_YAML,
    AccessPolicy,
    Actor,
    Operation,
    Role,
    load_access_policy,
)
from app.core.exceptions import AuthorizationError

ADMIN_ONLY = [
    Operation.TRANSITION,
    Operation.APPROVE,
    Operation.REJECT,
    Operation.BULK_APPROVE,
    Operation.ACTIVATE,
    Operation.DISCONTINUE,
    Operation.ARCHIVE,
    Operation.PENDING_APPROVALS,
    Operation.LIFECYCLE_STATS,
    Operation.CREATE_CATEGORY,
    Operation.UPDATE_CATEGORY,
    Operation.CREATE_PRICING_RULE,
    Operation.UPDATE_PRICING_RULE,
    Operation.SET_PRICE,
]

PUBLIC = [
    Operation.CREATE_PRODUCT,
    Operation.SUBMIT_FOR_APPROVAL,
    Operation.PRODUCTS_BY_STATE,
    Operation.LIFECYCLE_HISTORY,
    Operation.LIST_CATEGORIES,
    Operation.GET_CATEGORY,
    Operation.CALCULATE_PRICE,
    Operation.CALCULATE_BUNDLE,
    Operation.COMPARE_PRICES,
    Operation.LIST_PRICING_RULES,
    Operation.PRICE_HISTORY,
]


@pytest.fixture
def policy() -> AccessPolicy:
    return AccessPolicy.from_yaml(DEFAULT_POLICY_YAML)


class TestRole:
    def test_parse_known_roles(self):
        assert Role.parse("admin") is Role.ADMIN
        assert Role.parse(" ADMIN ") is Role.ADMIN
        assert Role.parse("public") is Role.PUBLIC

    @pytest.mark.parametrize("value", [None, "", "superuser"])
    def test_unknown_roles_get_least_privilege(self, value):
        assert Role.parse(value) is Role.PUBLIC


class TestDefaultPolicy:
    def test_covers_every_operation(self, policy: AccessPolicy):
        assert set(policy.rules) == set(Operation)

    @pytest.mark.parametrize("operation", ADMIN_ONLY)
    def test_admin_only_operations(self, policy: AccessPolicy, operation: Operation):
        assert policy.is_allowed(Actor("a", Role.ADMIN), operation)
        assert not policy.is_allowed(Actor("u", Role.PUBLIC), operation)

    @pytest.mark.parametrize("operation", PUBLIC)
    def test_public_operations(self, policy: AccessPolicy, operation: Operation):
        assert policy.is_allowed(Actor("u", Role.PUBLIC), operation)
        assert policy.is_allowed(Actor("a", Role.ADMIN), operation)

    def test_require_raises_authorization_error(self, policy: AccessPolicy):
        with pytest.raises(AuthorizationError) as exc_info:
            policy.require(Actor("u", Role.PUBLIC), Operation.APPROVE)

        assert exc_info.value.status_code == 403
        assert exc_info.value.operation == "approve"
        assert exc_info.value.role == "public"

    def test_disabled_policy_allows_everything(self):
        policy = AccessPolicy.from_yaml(DEFAULT_POLICY_YAML, enabled=False)
        policy.require(Actor("u", Role.PUBLIC), Operation.ARCHIVE)


class TestPolicyLoading:
    def test_missing_operation_is_denied(self):
        policy = AccessPolicy.from_yaml("operations:\n  approve: [admin]\n")
        assert not policy.is_allowed(Actor("a", Role.ADMIN), Operation.ARCHIVE)

    def test_unknown_operation_rejected(self):
        with pytest.raises(ValueError, match="teleport"):
            AccessPolicy.from_yaml("operations:\n  teleport: [admin]\n")

    def test_unknown_role_rejected(self):
        with pytest.raises(ValueError):
            AccessPolicy.from_yaml("operations:\n  approve: [wizard]\n")

    def test_load_from_file(self, tmp_path):
        policy_file = tmp_path / "policy.yaml"
        policy_file.write_text(
            'version: "7"\noperations:\n  approve: [admin, public]\n',
            encoding="utf-8",
        )

        policy = load_access_policy(str(policy_file))

        assert policy.version == "7"
        assert policy.is_allowed(Actor("u", Role.PUBLIC), Operation.APPROVE)

    def test_load_missing_file(self, tmp_path):
        with pytest.raises(FileNotFoundError):
            load_access_policy(str(tmp_path / "absent.yaml"))

    def test_load_default_without_path(self):
        policy = load_access_policy(None)
        assert policy.version == "1"
