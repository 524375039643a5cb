"""Unit tests for TypedFinderBuilder and the dimension value types."""

from __future__ import annotations

import dataclasses
import enum

import pytest

from mp_finder.application.filtering import ItemFilter
from mp_finder.application.finder import (
    ALWAYS,
    Dimension,
    DimensionObjects,
    FinderImpl,
    TypedFinderBuilder,
    equals,
    when,
)
from mp_finder.application.finder.value_types import (
    boolean_matches,
    enum_value,
    fixed_text_type,
    long_type,
    process_help_request,
    set_values,
    string_type,
)
from mp_finder.kernel.conditions import ParameterCondition, ValueCondition
from mp_finder.kernel.errors import BadRequestError, LocatorProcessError, NotFoundError, OperationError
from mp_finder.kernel.locator import Locator


class Role(enum.Enum):
    ADMIN = "admin"
    DEVELOPER = "developer"
    VIEWER = "viewer"


@dataclasses.dataclass(frozen=True)
class User:
    id: int
    username: str
    role: Role
    active: bool = True
    groups: tuple[str, ...] = ()
    properties: tuple[tuple[str, str], ...] = ()
    secret: str | None = None


ID = Dimension[int]("id")
USERNAME = Dimension[str]("username")
NAME_MATCH = Dimension[ValueCondition]("nameMatch")
ROLE = Dimension[Role]("role")
ROLES = Dimension[frozenset[Role]]("roles")
ACTIVE = Dimension[bool]("active")
GROUP = Dimension[str]("group")
PROPERTY = Dimension[ParameterCondition]("property")
SECRET = Dimension[str]("secret")

ALICE = User(1, "alice", Role.ADMIN, groups=("ops", "dev"), properties=(("team", "core-platform"),))
BOB = User(2, "bob", Role.DEVELOPER, groups=("dev",), secret="s3")
CAROL = User(3, "carol", Role.VIEWER, groups=("ops",))
DAVE = User(4, "dave", Role.DEVELOPER, active=False, groups=("dev",))
USERS = [ALICE, BOB, CAROL, DAVE]


def _positive(value: int) -> int:
    if value <= 0:
        raise BadRequestError(f"User id should be positive: {value}")
    return value


def _user_builder(users: list[User]) -> TypedFinderBuilder[User]:
    by_id = {u.id: u for u in users}

    def find_by_id(locator: Locator) -> User | None:
        if locator.lookup_single_dimension_value(ID.name) is None:
            return None
        return by_id.get(locator.get_single_dimension_value_as_long(ID.name) or 0)

    builder = TypedFinderBuilder[User]()
    builder.name("UserFinder")
    builder.dimension_long(ID).description("internal user id").dimension_checker(_positive).value_for_default_filter(
        lambda u: u.id
    )
    builder.dimension_string(USERNAME).description("user name").value_for_default_filter(lambda u: u.username)
    builder.dimension_value_condition(NAME_MATCH).value_for_default_filter(lambda u: u.username)
    builder.dimension_enum(ROLE, Role).value_for_default_filter(lambda u: u.role)
    builder.dimension_enums(ROLES, Role).value_for_default_filter(lambda u: u.role)
    builder.dimension_boolean(ACTIVE).description("is the user active").with_default(
        "true"
    ).value_for_default_filter(lambda u: u.active)
    builder.dimension_string(GROUP).description("group key").to_items(
        lambda key: [u for u in users if key in u.groups]
    )
    builder.dimension_parameter_condition(PROPERTY).value_for_default_filter(lambda u: dict(u.properties))
    builder.dimension_string(SECRET).hidden().value_for_default_filter(lambda u: u.secret)

    builder.single_dimension(lambda value: [u for u in users if u.username == value])
    builder.multiple_convert_to_items(ALWAYS, lambda dimensions: list(users))
    builder.find_single_item(find_by_id)
    builder.locator_provider(lambda u: f"id:{u.id}")
    builder.container_set_provider(set)
    return builder


@pytest.fixture()
def builder() -> TypedFinderBuilder[User]:
    return _user_builder(USERS)


@pytest.fixture()
def users(builder: TypedFinderBuilder[User]) -> FinderImpl[User]:
    return builder.build()


# ---------------------------------------------------------------------------
# Dimension
# ---------------------------------------------------------------------------


class TestDimension:
    def test_empty_name_rejected(self) -> None:
        with pytest.raises(OperationError, match="Wrong dimension name: empty"):
            Dimension[str]("")

    def test_single(self) -> None:
        assert Dimension.single().name == "$singleValue"

    def test_str(self) -> None:
        assert str(ID) == "Dimension 'id'"

    def test_conditions(self) -> None:
        assert when(ROLE).complies(Locator("role:admin"))
        assert not when(ROLE).complies(Locator("id:1"))
        assert when(ROLE, equals("admin")).complies(Locator("role:viewer,role:admin"))
        assert not when(ROLE, equals("admin")).when(ID).complies(Locator("role:admin"))
        assert ALWAYS.complies(Locator("anything"))


class TestDimensionObjects:
    def test_get_marks_used(self) -> None:
        objects = DimensionObjects({"id": [1], "role": [Role.ADMIN]})
        assert objects.lookup(ROLE) == [Role.ADMIN]
        assert objects.used_dimensions == set()
        assert objects.get(ID) == [1]
        assert objects.used_dimensions == {"id"}
        assert objects.unused_dimensions == {"role"}

    def test_absent(self) -> None:
        assert DimensionObjects({}).get(ID) is None

    def test_builder_parses_and_applies_defaults(self, builder: TypedFinderBuilder[User]) -> None:
        objects = builder.get_dimension_objects(Locator("username:alice,role:Viewer"))
        assert objects.lookup(USERNAME) == ["alice"]
        assert objects.lookup(ROLE) == [Role.VIEWER]
        assert objects.lookup(ACTIVE) == [True]


# ---------------------------------------------------------------------------
# Registration
# ---------------------------------------------------------------------------


class TestRegistration:
    def test_duplicate_dimension(self, builder: TypedFinderBuilder[User]) -> None:
        with pytest.raises(OperationError, match="Dimension with name 'username' was already added"):
            builder.dimension_string(USERNAME)

    def test_redefined_description(self) -> None:
        registration = TypedFinderBuilder[User]().dimension_string(USERNAME).description("first")
        with pytest.raises(OperationError, match="Attempt to redefine description"):
            registration.description("second")

    def test_empty_description(self) -> None:
        with pytest.raises(OperationError, match="Wrong description: empty"):
            TypedFinderBuilder[User]().dimension_string(USERNAME).description("")

    def test_hidden_twice(self) -> None:
        registration = TypedFinderBuilder[User]().dimension_string(SECRET).hidden()
        with pytest.raises(OperationError):
            registration.hidden()

    def test_default_filter_required(self) -> None:
        registration = TypedFinderBuilder[User]().dimension(USERNAME, string_type())
        with pytest.raises(OperationError, match="No default filter is defined for Dimension 'username'"):
            registration.value_for_default_filter(lambda u: u.username)

    def test_overriding_filter_condition(self) -> None:
        builder = TypedFinderBuilder[User]()
        condition = when(USERNAME)
        builder.filter(condition, lambda dimensions: None)
        with pytest.raises(OperationError, match="Overriding dimension condition"):
            builder.filter(condition, lambda dimensions: None)

    def test_known_and_hidden_dimensions(self, builder: TypedFinderBuilder[User]) -> None:
        known = builder.get_known_dimensions()
        assert known[:3] == ["id", "username", "nameMatch"]
        assert "secret" not in known
        assert known[-1] == "$singleValue"
        assert builder.get_hidden_dimensions() == ["secret"]

    def test_finder_name(self, users: FinderImpl[User]) -> None:
        assert users.name == "UserFinder"
        assert "secret" in users.supported_dimensions()


# ---------------------------------------------------------------------------
# Resolution
# ---------------------------------------------------------------------------


class TestResolution:
    def test_default_hides_inactive(self, users: FinderImpl[User]) -> None:
        assert users.get_items("role:developer").items == [BOB]
        assert users.get_items("role:developer,active:any").items == [BOB, DAVE]
        assert users.get_items("active:false").items == [DAVE]

    def test_fast_path_by_id(self, users: FinderImpl[User]) -> None:
        assert users.get_item("id:2") is BOB

    def test_fast_path_item_filtered_by_default(self, users: FinderImpl[User]) -> None:
        with pytest.raises(NotFoundError, match=r"Found single item by dimension \[id\], but that was filtered out"):
            users.get_item("id:4")
        assert users.get_item("id:4,active:any") is DAVE

    def test_unknown_id_scans(self, users: FinderImpl[User]) -> None:
        with pytest.raises(NotFoundError):
            users.get_item("id:99")

    def test_dimension_checker(self, users: FinderImpl[User]) -> None:
        with pytest.raises(BadRequestError, match="User id should be positive: 0"):
            users.get_items("id:0")

    def test_single_value(self, users: FinderImpl[User]) -> None:
        assert users.get_item("carol") is CAROL
        # defaults are not applied to single values
        assert users.get_item("dave") is DAVE
        with pytest.raises(NotFoundError):
            users.get_item("nobody")

    def test_value_condition(self, users: FinderImpl[User]) -> None:
        result = users.get_items("nameMatch:(value:B,matchType:starts-with,ignoreCase:true)")
        assert result.items == [BOB]

    def test_enums(self, users: FinderImpl[User]) -> None:
        assert users.get_items("roles:(item:admin,item:viewer)").items == [ALICE, CAROL]
        assert users.get_items("roles:developer").items == [BOB]

    def test_parameter_condition(self, users: FinderImpl[User]) -> None:
        assert users.get_items("property:(name:team,value:core)").items == [ALICE]
        assert users.get_items("property:(name:team,value:other)").items == []

    def test_hidden_dimension_filters(self, users: FinderImpl[User]) -> None:
        assert users.get_items("secret:s3").items == [BOB]

    def test_to_items_intersects_values(self, users: FinderImpl[User]) -> None:
        assert users.get_items("group:dev").items == [ALICE, BOB]
        assert users.get_items("group:dev,group:ops").items == [ALICE]
        assert users.get_items("group:nobody").items == []

    def test_to_items_combined_with_filters(self, users: FinderImpl[User]) -> None:
        assert users.get_items("group:dev,role:admin").items == [ALICE]
        assert users.get_items("group:dev,active:false").items == [DAVE]

    def test_canonical_locator_round_trip(self, users: FinderImpl[User]) -> None:
        for user in (ALICE, BOB, CAROL):
            assert users.get_item(users.get_canonical_locator(user)) is user

    def test_item_dimension_deduplicates(self, users: FinderImpl[User]) -> None:
        assert users.get_items("item:(id:1),item:(id:1),item:(id:3)").items == [ALICE, CAROL]
        assert users.get_items("item:(id:1),item:(id:1),unique:false").items == [ALICE, ALICE]

    def test_nested_locator_dimension(self) -> None:
        builder = _user_builder(USERS)
        builder.dimension_locator(Dimension[Locator]("who"), "name").filter(
            lambda who, u: u.username == who.get_single_dimension_value("name")
        )
        assert builder.build().get_items("who:(name:carol)").items == [CAROL]

    def test_single_value_dimension_filter(self) -> None:
        builder = TypedFinderBuilder[User]()
        builder.dimension_long(Dimension.single()).value_for_default_filter(lambda u: u.id)
        builder.multiple_convert_to_items(ALWAYS, lambda dimensions: list(USERS))
        assert builder.build().get_items("3").items == [CAROL]


# ---------------------------------------------------------------------------
# Errors and help
# ---------------------------------------------------------------------------


class TestErrors:
    def test_value_error_names_dimension(self, users: FinderImpl[User]) -> None:
        with pytest.raises(LocatorProcessError, match="Error in dimension 'role', value: 'boss'") as exc_info:
            users.get_items("role:boss")
        assert "Supported values are: [admin, developer, viewer]" in exc_info.value.message

    def test_unknown_dimension(self, users: FinderImpl[User]) -> None:
        with pytest.raises(LocatorProcessError, match=r"Locator dimension \[bogus\] is unknown"):
            users.get_items("bogus:1")

    def test_value_help(self, users: FinderImpl[User]) -> None:
        with pytest.raises(LocatorProcessError) as exc_info:
            users.get_items("role:$help")
        assert exc_info.value.message == "Locator help requested: Supported values are: [admin, developer, viewer]"

    def test_help_lists_visible_dimensions(self, users: FinderImpl[User]) -> None:
        with pytest.raises(LocatorProcessError) as exc_info:
            users.get_items("$help")
        message = exc_info.value.message
        assert message.startswith("Locator help requested: Supported locator dimensions:\n")
        assert "id - internal user id (type: number)\n" in message
        assert "role (type: one of [admin, developer, viewer])\n" in message
        assert "secret" not in message

    def test_help_with_hidden(self, users: FinderImpl[User]) -> None:
        with pytest.raises(LocatorProcessError) as exc_info:
            users.get_items("$help:(hidden:true)")
        assert "secret (type: text)\n" in exc_info.value.message

    def test_no_conditions_matched(self) -> None:
        builder = TypedFinderBuilder[User]()
        builder.dimension_string(USERNAME).value_for_default_filter(lambda u: u.username)
        with pytest.raises(OperationError, match="No conditions matched"):
            builder.build().get_items("username:alice")

    def test_missing_locator_provider(self) -> None:
        builder = TypedFinderBuilder[User]()
        builder.multiple_convert_to_items(ALWAYS, lambda dimensions: list(USERS))
        with pytest.raises(OperationError, match="locator provider not set"):
            builder.build().get_canonical_locator(ALICE)

    def test_single_value_handler_returning_none(self) -> None:
        builder = TypedFinderBuilder[User]()
        builder.single_dimension(lambda value: None)
        builder.multiple_convert_to_items(ALWAYS, lambda dimensions: list(USERS))
        with pytest.raises(OperationError, match="Single value items provider returned"):
            builder.build().get_items("alice")


# ---------------------------------------------------------------------------
# Value types
# ---------------------------------------------------------------------------


class TestValueTypes:
    def test_enum_value_ignores_case(self) -> None:
        assert enum_value("Admin", Role) is Role.ADMIN

    def test_enum_value_unsupported(self) -> None:
        with pytest.raises(LocatorProcessError, match="Unsupported value 'x'"):
            enum_value("x", Role)

    def test_set_values(self) -> None:
        assert set_values("a", "letters", str.upper) == frozenset({"A"})
        assert set_values("item:a,item:b", "letters", str.upper) == frozenset({"A", "B"})

    def test_set_values_rejects_other_dimensions(self) -> None:
        with pytest.raises(LocatorProcessError):
            set_values("item:a,other:b", "letters", str)

    def test_fixed_text(self) -> None:
        value_type = fixed_text_type("Asc", "Desc")
        assert value_type.parse("asc") == "asc"
        assert value_type.description == "one of Asc, Desc"
        with pytest.raises(LocatorProcessError, match="Supported values are: Asc, Desc"):
            value_type.parse("up")

    def test_long(self) -> None:
        assert long_type().parse("-12") == -12
        with pytest.raises(LocatorProcessError, match="Should be a number"):
            long_type().parse("twelve")

    def test_boolean_matches(self) -> None:
        assert boolean_matches(None, False)
        assert boolean_matches(True, True)
        assert not boolean_matches(True, False)

    def test_process_help_request(self) -> None:
        process_help_request("plain", "ignored")
        with pytest.raises(LocatorProcessError, match="Locator help requested: some text"):
            process_help_request("$help", "some text")


# ---------------------------------------------------------------------------
# Cross-finder dimensions
# ---------------------------------------------------------------------------


@dataclasses.dataclass(frozen=True)
class Project:
    key: str
    owners: tuple[User, ...]
    stage: str


CORE = Project("core", (ALICE,), "Active")
WEB = Project("web", (BOB, CAROL), "Archived")
OPS = Project("ops", (CAROL,), "Active")

KEY = Dimension[str]("key")
KEYS = Dimension[frozenset[str]]("keys")
STAGE = Dimension[str]("stage")
OWNER = Dimension[list[User]]("owner")
LEAD = Dimension[ItemFilter[User]]("lead")


@pytest.fixture()
def projects(users: FinderImpl[User]) -> FinderImpl[Project]:
    builder = TypedFinderBuilder[Project]()
    builder.dimension_string(KEY).value_for_default_filter(lambda p: p.key)
    builder.dimension_set_of(KEYS, "project keys", str).value_for_default_filter(lambda p: p.key)
    builder.dimension_fixed_text(STAGE, "Active", "Archived").value_for_default_filter(lambda p: p.stage)
    builder.dimension_with_finder(OWNER, users, "user locator").value_for_default_filter(lambda p: p.owners)
    builder.dimension_finder_filter(LEAD, users, "user locator").value_for_default_filter(lambda p: p.owners[0])
    builder.multiple_convert_to_item_holder(ALWAYS, lambda dimensions: iter([CORE, WEB, OPS]))
    builder.defaults(when(OWNER), {"stage": "Active"})
    builder.default_page_size(2)
    return builder.build()


class TestCrossFinderDimensions:
    def test_fixed_text(self, projects: FinderImpl[Project]) -> None:
        assert projects.get_items("stage:archived").items == [WEB]
        with pytest.raises(LocatorProcessError, match="Error in dimension 'stage', value: 'gone'"):
            projects.get_items("stage:gone")

    def test_set_of_values(self, projects: FinderImpl[Project]) -> None:
        assert projects.get_items("keys:(item:core,item:ops)").items == [CORE, OPS]

    def test_default_page_size(self, projects: FinderImpl[Project]) -> None:
        result = projects.get_items("keys:(item:core,item:web,item:ops)")
        assert result.items == [CORE, WEB]
        assert result.count == 2
        assert projects.get_items("keys:(item:core,item:web,item:ops),count:-1").items == [CORE, WEB, OPS]

    def test_items_of_another_finder(self, projects: FinderImpl[Project]) -> None:
        assert projects.get_items("owner:(username:carol)").items == [OPS]
        assert projects.get_items("owner:(username:carol),stage:archived").items == [WEB]

    def test_nothing_found_by_nested_finder(self, projects: FinderImpl[Project]) -> None:
        with pytest.raises(LocatorProcessError, match="Nothing found by locator 'username:nobody'"):
            projects.get_items("owner:(username:nobody)")

    def test_filter_of_another_finder(self, projects: FinderImpl[Project]) -> None:
        assert projects.get_items("lead:(role:developer)").items == [WEB]
        assert projects.get_items("lead:(role:admin)").items == [CORE]
