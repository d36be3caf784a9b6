"""
modelgraph: unit tests for the deserialization engine

Purpose
- Key filtering, date coercion, depth-bounded association rebuild, the
  to-many fallback, validation gating and fatal target resolution.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import UTC, datetime, timedelta, timezone

import pytest
import structlog

from modelgraph import (
    DeserializeOptions,
    Model,
    ModelDefinitionError,
    ValidationError,
    attribute,
    belongs_to_one,
    has_many,
    has_one,
    lazy,
)
from modelgraph.deserialization import deserialize
from modelgraph.rules import length
from modelgraph.types import DateType, IntegerType, StringType


class Team(Model):
    __attributes__ = {
        "name": attribute(StringType()),
        "founded": attribute(DateType(), optional=True),
        "size": attribute(IntegerType(), default=5, optional=True),
    }
    __associations__ = {
        "members": has_many(lazy(lambda: Member)),
        "lead": has_one(lazy(lambda: Member)),
    }
    __validations__ = {"name": (length(min=2),)}


class Member(Model):
    __attributes__ = {"handle": attribute(StringType())}
    __associations__ = {"team": belongs_to_one(Team)}


class Broken(Model):
    __attributes__ = {"name": attribute(StringType())}
    __associations__ = {"ghost": has_one(lazy(lambda: _missing_model()))}


def _missing_model() -> type[Model]:
    raise LookupError("ghost model not registered")


@dataclass
class _TeamRecord:
    name: str
    size: int


async def test_unknown_keys_are_dropped_and_defaults_not_applied() -> None:
    team = await deserialize(Team, {"name": "core", "unknown": 1})

    assert isinstance(team, Team)
    assert team.field_values() == {"name": "core"}


async def test_dates_are_parsed_from_iso_strings() -> None:
    team = await Team.deserialize({"name": "core", "founded": "2026-04-01T08:30:00Z"})

    assert team.founded == datetime(2026, 4, 1, 8, 30, tzinfo=UTC)

    offset = await Team.deserialize({"name": "core", "founded": "2026-04-01T08:30:00+02:00"})
    assert offset.founded == datetime(2026, 4, 1, 8, 30, tzinfo=timezone(timedelta(hours=2)))


async def test_unparseable_date_is_reported_by_validation() -> None:
    with pytest.raises(ValidationError) as excinfo:
        await Team.deserialize({"name": "core", "founded": "yesterday"})

    assert [issue.kind for issue in excinfo.value.errors["founded"]] == ["attribute.type"]

    raw = await Team.deserialize({"name": "core", "founded": "yesterday"}, validate=False)
    assert raw.founded == "yesterday"


async def test_associations_are_rebuilt_as_model_instances() -> None:
    team = await Team.deserialize(
        {
            "name": "core",
            "members": [{"handle": "a", "team": {"name": "core"}}, {"handle": "b"}],
            "lead": {"handle": "a"},
        }
    )

    assert [type(member) for member in team.members] == [Member, Member]
    assert [member.handle for member in team.members] == ["a", "b"]
    assert team.lead == Member({"handle": "a"})
    # depth 1 reaches members (depth 0) and their team (depth -1, attributes only)
    assert team.members[0].team == Team({"name": "core"}, defaults=False)


async def test_depth_zero_keeps_first_level_only() -> None:
    team = await Team.deserialize(
        {"name": "core", "members": [{"handle": "a", "team": {"name": "x"}}]}, depth=0
    )

    assert team.members == [Member({"handle": "a"})]
    assert "team" not in team.members[0]


async def test_negative_depth_leaves_associations_unset() -> None:
    with structlog.testing.capture_logs() as logs:
        team = await Team.deserialize({"name": "core", "members": [{"handle": "a"}]}, depth=-1)

    assert "members" not in team
    assert team.members is None
    assert any(entry["event"] == "association_depth_exhausted" for entry in logs)


async def test_disabled_associations_are_ignored() -> None:
    options = DeserializeOptions(associations=False)

    team = await Team.deserialize({"name": "core", "lead": {"handle": "a"}}, options)

    assert "lead" not in team


async def test_to_many_non_collection_becomes_empty_list() -> None:
    team = await Team.deserialize({"name": "core", "members": "not-an-array"})

    assert team.members == []


async def test_scalar_to_one_value_is_reported_as_validation_error() -> None:
    with structlog.testing.capture_logs() as logs:
        with pytest.raises(ValidationError) as excinfo:
            await Team.deserialize({"name": "core", "lead": "oops"})

    assert excinfo.value.model_type is Member
    assert [issue.kind for issue in excinfo.value.errors["handle"]] == ["attribute.required"]
    assert any(entry["event"] == "association_record_coerced_empty" for entry in logs)


async def test_scalar_to_many_element_is_reported_as_validation_error() -> None:
    with pytest.raises(ValidationError) as excinfo:
        await Team.deserialize({"name": "core", "members": [{"handle": "a"}, 1]})

    assert excinfo.value.model_type is Member
    assert list(excinfo.value.errors) == ["handle"]

    team = await Team.deserialize({"name": "core", "members": [1]}, validate=False)
    assert team.members == [Member({}, defaults=False)]


async def test_nil_association_values_are_skipped() -> None:
    team = await Team.deserialize({"name": "core", "lead": None})

    assert "lead" not in team


async def test_nested_validation_failure_fails_the_whole_call() -> None:
    with pytest.raises(ValidationError) as excinfo:
        await Team.deserialize({"name": "core", "members": [{"handle": "a"}, {"handle": 7}]})

    assert excinfo.value.model_type is Member
    assert list(excinfo.value.errors) == ["handle"]


async def test_outer_validation_failure() -> None:
    with pytest.raises(ValidationError, match=r"Team\.name: attribute\.length"):
        await Team.deserialize({"name": "x"})


async def test_validation_can_be_disabled() -> None:
    team = await Team.deserialize({}, validate=False)

    assert team.field_values() == {}


async def test_unresolvable_target_is_fatal_regardless_of_depth() -> None:
    with pytest.raises(ModelDefinitionError, match=r"Broken\.ghost: .*ghost model not registered"):
        await Broken.deserialize({"name": "b", "ghost": {}}, depth=-1)


async def test_accepts_objects_and_models_as_input() -> None:
    from_record = await Team.deserialize(_TeamRecord(name="core", size=3))
    from_model = await Team.deserialize(Team({"name": "core"}))

    assert from_record.field_values() == {"name": "core", "size": 3}
    assert from_model.field_values() == {"name": "core", "size": 5}


async def test_rejects_scalar_input() -> None:
    with pytest.raises(TypeError, match=r"Team: cannot coerce str"):
        await Team.deserialize("core")


async def test_input_is_not_aliased() -> None:
    payload = {"name": "core", "members": [{"handle": "a"}]}

    team = await Team.deserialize(payload)
    payload["members"][0]["handle"] = "changed"

    assert team.members[0].handle == "a"
