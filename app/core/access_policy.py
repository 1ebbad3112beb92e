"""Access Policy - which roles may perform which catalog operations.

The policy is a YAML document mapping operation names to the roles allowed
to run them. A built-in default mirrors the catalog's admin/public split;
deployments can point `ACCESS_POLICY_PATH` at their own file.
"""

from dataclasses import dataclass
from enum import Enum
from functools import lru_cache
from pathlib import Path
from typing import Any

import yaml

from app.config import settings
from app.core.exceptions import AuthorizationError
from app.infra.logging import get_logger

logger = get_logger(__name__)


class Role(str, Enum):
    """Roles asserted by the upstream identity gateway."""

    ADMIN = "admin"
    PUBLIC = "public"

    @classmethod
    def parse(cls, value: str | None) -> "Role":
        """Parse a header value; unknown or missing roles get least privilege."""
        if not value:
            return cls.PUBLIC
        try:
            return cls(value.strip().lower())
        except ValueError:
            logger.debug("Unknown role, treating as public", role=value)
            return cls.PUBLIC


@dataclass(frozen=True)
class Actor:
    """The user on whose behalf an operation runs.

    Attributes:
        user_id: Identifier recorded in audit history
        role: Role used for authorization checks
    """

    user_id: str
    role: Role = Role.PUBLIC

    @property
    def is_admin(self) -> bool:
        return self.role is Role.ADMIN


class Operation(str, Enum):
    """Operation names referenced by the access policy."""

    CREATE_PRODUCT = "create_product"
    TRANSITION = "transition"
    SUBMIT_FOR_APPROVAL = "submit_for_approval"
    APPROVE = "approve"
    REJECT = "reject"
    BULK_APPROVE = "bulk_approve"
    ACTIVATE = "activate"
    DISCONTINUE = "discontinue"
    ARCHIVE = "archive"
    PENDING_APPROVALS = "pending_approvals"
    PRODUCTS_BY_STATE = "products_by_state"
    LIFECYCLE_HISTORY = "lifecycle_history"
    LIFECYCLE_STATS = "lifecycle_stats"
    CREATE_CATEGORY = "create_category"
    LIST_CATEGORIES = "list_categories"
    GET_CATEGORY = "get_category"
    UPDATE_CATEGORY = "update_category"
    CALCULATE_PRICE = "calculate_price"
    CALCULATE_BUNDLE = "calculate_bundle"
    COMPARE_PRICES = "compare_prices"
    LIST_PRICING_RULES = "list_pricing_rules"
    CREATE_PRICING_RULE = "create_pricing_rule"
    UPDATE_PRICING_RULE = "update_pricing_rule"
    SET_PRICE = "set_price"
    PRICE_HISTORY = "price_history"


DEFAULT_POLICY_YAML = """
version: "1"
operations:
  create_product: [public, admin]
  submit_for_approval: [public, admin]
  products_by_state: [public, admin]
  lifecycle_history: [public, admin]
  list_categories: [public, admin]
  get_category: [public, admin]
  calculate_price: [public, admin]
  calculate_bundle: [public, admin]
  compare_prices: [public, admin]
  list_pricing_rules: [public, admin]
  price_history: [public, admin]
  transition: [admin]
  approve: [admin]
  reject: [admin]
  bulk_approve: [admin]
  activate: [admin]
  discontinue: [admin]
  archive: [admin]
  pending_approvals: [admin]
  lifecycle_stats: [admin]
  create_category: [admin]
  update_category: [admin]
  create_pricing_rule: [admin]
  update_pricing_rule: [admin]
  set_price: [admin]
"""


@dataclass(frozen=True)
class AccessPolicy:
    """Immutable role table.

    Operations missing from the table are denied to everyone.
    """

    version: str
    rules: dict[Operation, frozenset[Role]]
    enabled: bool = True

    @classmethod
    def from_yaml(cls, yaml_content: str, enabled: bool = True) -> "AccessPolicy":
        """Parse YAML content into an AccessPolicy.

        Raises:
            ValueError: If an operation or role name is unknown
        """
        data: dict[str, Any] = yaml.safe_load(yaml_content) or {}

        rules: dict[Operation, frozenset[Role]] = {}
        for op_name, roles in (data.get("operations") or {}).items():
            try:
                operation = Operation(op_name)
                rules[operation] = frozenset(Role(role) for role in roles or [])
            except ValueError as e:
                raise ValueError(f"Invalid access policy entry '{op_name}': {e}") from e

        return cls(version=str(data.get("version", "0")), rules=rules, enabled=enabled)

    def allowed_roles(self, operation: Operation) -> frozenset[Role]:
        return self.rules.get(operation, frozenset())

    def is_allowed(self, actor: Actor, operation: Operation) -> bool:
        if not self.enabled:
            return True
        return actor.role in self.allowed_roles(operation)

    def require(self, actor: Actor, operation: Operation) -> None:
        """Ensure the actor may perform the operation.

        Raises:
            AuthorizationError: If the actor's role is not permitted
        """
        if not self.is_allowed(actor, operation):
            logger.warning(
                "Operation denied",
                operation=operation.value,
                user_id=actor.user_id,
                role=actor.role.value,
            )
            raise AuthorizationError(operation.value, actor.role.value)


def load_access_policy(path: str | None = None, enabled: bool = True) -> AccessPolicy:
    """Load the access policy from a YAML file, or the built-in default."""
    if path:
        policy_file = Path(path)
        if not policy_file.exists():
            raise FileNotFoundError(f"Access policy not found: {policy_file}")
        logger.info("Loading access policy from file", path=str(policy_file))
        return AccessPolicy.from_yaml(policy_file.read_text(encoding="utf-8"), enabled=enabled)

    return AccessPolicy.from_yaml(DEFAULT_POLICY_YAML, enabled=enabled)


@lru_cache
def get_access_policy() -> AccessPolicy:
    """Get the process-wide access policy built from settings."""
    policy = load_access_policy(
        settings.access_policy_path,
        enabled=settings.authorization_enabled,
    )
    logger.info(
        "Access policy loaded",
        version=policy.version,
        enabled=policy.enabled,
        operations=len(policy.rules),
    )
    return policy
