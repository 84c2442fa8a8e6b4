"""Rules for resource-revision types, instances and histories."""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass
import re

from aipcheck.rules.aliases import AliasTable
from aipcheck.rules.aliases import Assigned
from aipcheck.rules.registry import Finding
from aipcheck.rules.registry import Rule
from aipcheck.rules.registry import RuleCategory
from aipcheck.schemas.report import Severity
from aipcheck.schemas.revision import LATEST_ALIAS
from aipcheck.schemas.revision import ResourceRevision
from aipcheck.schemas.revision import RevisionSchema

NAME_PATTERN_SUFFIX = re.compile(r".+/revisions/\{[a-z][a-z0-9_]*\}")
REQUIRED_FIELDS = ("name", "snapshot", "create_time")
TIMESTAMP_TYPES = frozenset({"google.protobuf.Timestamp", "timestamp"})


@dataclass(frozen=True)
class HistoryCheckContext:
    """Revisions of one parent in creation order, plus an optional earlier observation."""

    revisions: Sequence[ResourceRevision]
    previous: Sequence[ResourceRevision] | None = None


def check_schema_name_pattern(schema: RevisionSchema) -> list[Finding]:
    if NAME_PATTERN_SUFFIX.fullmatch(schema.name_pattern):
        return []
    return [
        Finding(
            message=f"Revision name pattern `{schema.name_pattern}` must end with `/revisions/{{revision}}`",
            path="name_pattern",
        )
    ]


def check_schema_required_fields(schema: RevisionSchema) -> list[Finding]:
    return [
        Finding(message=f"Revision type `{schema.type_name}` must declare `{name}`", path=name)
        for name in REQUIRED_FIELDS
        if schema.field_named(name) is None
    ]


def check_schema_snapshot_type(schema: RevisionSchema) -> list[Finding]:
    snapshot = schema.field_named("snapshot")
    if snapshot is None:
        return []
    if snapshot.type == schema.parent_type and not snapshot.repeated:
        return []
    return [
        Finding(
            message=f"`snapshot` must be a single `{schema.parent_type}`, got `{snapshot.type}`",
            path="snapshot",
        )
    ]


def check_schema_field_types(schema: RevisionSchema) -> list[Finding]:
    findings: list[Finding] = []
    name = schema.field_named("name")
    if name is not None and (name.type != "string" or name.repeated):
        findings.append(Finding(message="`name` must be a single string", path="name"))
    create_time = schema.field_named("create_time")
    if create_time is not None and (create_time.type not in TIMESTAMP_TYPES or create_time.repeated):
        findings.append(
            Finding(message="`create_time` must be a single google.protobuf.Timestamp", path="create_time")
        )
    return findings


def check_schema_alias_set(schema: RevisionSchema) -> list[Finding]:
    alternate_ids = schema.field_named("alternate_ids")
    if alternate_ids is None:
        return []
    if alternate_ids.repeated and not alternate_ids.ordered and alternate_ids.type == "string":
        return []
    return [
        Finding(
            message="`alternate_ids` must be a repeated string field whose order carries no meaning",
            path="alternate_ids",
        )
    ]


def check_revision_required_fields(revision: ResourceRevision) -> list[Finding]:
    missing = []
    if not revision.name:
        missing.append("name")
    if revision.snapshot is None:
        missing.append("snapshot")
    if revision.create_time is None:
        missing.append("create_time")
    return [Finding(message=f"Revision is missing `{name}`", path=name) for name in missing]


def check_revision_name(revision: ResourceRevision) -> list[Finding]:
    if not revision.name or revision.parent is not None:
        return []
    return [
        Finding(
            message=f"Revision name `{revision.name}` must end with `/revisions/{{revision_id}}`",
            path="name",
        )
    ]


def check_revision_aliases_unique(revision: ResourceRevision) -> list[Finding]:
    seen: set[str] = set()
    findings: list[Finding] = []
    for index, alias in enumerate(revision.alternate_ids):
        if alias in seen:
            findings.append(
                Finding(message=f"Alias `{alias}` is listed more than once", path=f"alternate_ids[{index}]")
            )
        seen.add(alias)
    return findings


def check_revision_reserved_alias(revision: ResourceRevision) -> list[Finding]:
    return [
        Finding(
            message=f"`{LATEST_ALIAS}` is resolved by the server and cannot be assigned",
            path=f"alternate_ids[{index}]",
        )
        for index, alias in enumerate(revision.alternate_ids)
        if alias == LATEST_ALIAS
    ]


def check_history_parent(ctx: HistoryCheckContext) -> list[Finding]:
    parents = [revision.parent for revision in ctx.revisions]
    expected = next((parent for parent in parents if parent is not None), None)
    return [
        Finding(
            message=f"Revision belongs to `{parent}`, but the history is for `{expected}`",
            path=f"revisions[{index}].name",
        )
        for index, parent in enumerate(parents)
        if parent is not None and parent != expected
    ]


def check_history_unique_names(ctx: HistoryCheckContext) -> list[Finding]:
    seen: set[str] = set()
    findings: list[Finding] = []
    for index, revision in enumerate(ctx.revisions):
        if not revision.name:
            continue
        if revision.name in seen:
            findings.append(
                Finding(
                    message=f"Revision `{revision.name}` appears more than once",
                    path=f"revisions[{index}].name",
                )
            )
        seen.add(revision.name)
    return findings


def check_history_create_time(ctx: HistoryCheckContext) -> list[Finding]:
    latest = None
    findings: list[Finding] = []
    for index, revision in enumerate(ctx.revisions):
        if revision.create_time is None:
            continue
        if latest is not None and revision.create_time < latest:
            findings.append(
                Finding(
                    message=(
                        f"create_time {revision.create_time.isoformat()} is earlier than "
                        f"a previously created revision ({latest.isoformat()})"
                    ),
                    path=f"revisions[{index}].create_time",
                )
            )
            continue
        latest = revision.create_time
    return findings


def check_history_alias_resolution(ctx: HistoryCheckContext) -> list[Finding]:
    table = AliasTable()
    reported: set[str] = set()
    findings: list[Finding] = []
    for index, revision in enumerate(ctx.revisions):
        if not revision.name:
            continue
        table.record_revision(revision.name)
        for alias in dict.fromkeys(revision.alternate_ids):
            if alias == LATEST_ALIAS:
                continue
            previous = table.assign(alias, revision.name)
            if not isinstance(previous, Assigned) or previous.target == revision.name:
                continue
            if alias in reported:
                continue
            reported.add(alias)
            findings.append(
                Finding(
                    message=f"Alias `{alias}` resolves to both `{previous.target}` and `{revision.name}`",
                    path=f"revisions[{index}].alternate_ids",
                )
            )
    return findings


def check_history_immutable(ctx: HistoryCheckContext) -> list[Finding]:
    if ctx.previous is None:
        return []
    earlier = {revision.name: revision for revision in ctx.previous if revision.name}
    findings: list[Finding] = []
    for index, revision in enumerate(ctx.revisions):
        before = earlier.get(revision.name) if revision.name else None
        if before is None:
            continue
        if before.snapshot != revision.snapshot:
            findings.append(
                Finding(
                    message=f"Snapshot of `{revision.name}` changed after creation",
                    path=f"revisions[{index}].snapshot",
                )
            )
        if before.create_time != revision.create_time:
            findings.append(
                Finding(
                    message=f"create_time of `{revision.name}` changed after creation",
                    path=f"revisions[{index}].create_time",
                )
            )
    return findings


def _rule(rule_id: str, category: RuleCategory, check, description: str) -> Rule:
    return Rule(
        rule_id=rule_id,
        category=category,
        severity=Severity.ERROR,
        check=check,
        description=description,
    )


REVISION_RULES: tuple[Rule, ...] = (
    _rule(
        "MalformedRevisionNamePattern",
        RuleCategory.REVISION_SCHEMA,
        check_schema_name_pattern,
        "Revision names end with /revisions/{revision}",
    ),
    _rule(
        "MissingSchemaField",
        RuleCategory.REVISION_SCHEMA,
        check_schema_required_fields,
        "Revision types declare name, snapshot and create_time",
    ),
    _rule(
        "SnapshotTypeMismatch",
        RuleCategory.REVISION_SCHEMA,
        check_schema_snapshot_type,
        "snapshot holds the parent resource type",
    ),
    _rule(
        "FieldTypeMismatch",
        RuleCategory.REVISION_SCHEMA,
        check_schema_field_types,
        "name and create_time use their standard types",
    ),
    _rule(
        "OrderedAliasSet",
        RuleCategory.REVISION_SCHEMA,
        check_schema_alias_set,
        "alternate_ids is an unordered set of strings",
    ),
    _rule(
        "MissingField",
        RuleCategory.REVISION_INSTANCE,
        check_revision_required_fields,
        "Revisions carry name, snapshot and create_time",
    ),
    _rule(
        "MalformedRevisionName",
        RuleCategory.REVISION_INSTANCE,
        check_revision_name,
        "Revision names end with /revisions/{revision_id}",
    ),
    _rule(
        "DuplicateAlias",
        RuleCategory.REVISION_INSTANCE,
        check_revision_aliases_unique,
        "alternate_ids holds no repeated value",
    ),
    _rule(
        "ReservedAlias",
        RuleCategory.REVISION_INSTANCE,
        check_revision_reserved_alias,
        "latest is never assigned explicitly",
    ),
    _rule(
        "ParentMismatch",
        RuleCategory.REVISION_HISTORY,
        check_history_parent,
        "A history holds revisions of one parent",
    ),
    _rule(
        "DuplicateRevisionName",
        RuleCategory.REVISION_HISTORY,
        check_history_unique_names,
        "Revision names are unique within a history",
    ),
    _rule(
        "NonMonotonicCreateTime",
        RuleCategory.REVISION_HISTORY,
        check_history_create_time,
        "create_time never decreases in creation order",
    ),
    _rule(
        "AmbiguousAlias",
        RuleCategory.REVISION_HISTORY,
        check_history_alias_resolution,
        "Each alias resolves to exactly one revision",
    ),
    _rule(
        "SnapshotMutated",
        RuleCategory.REVISION_HISTORY,
        check_history_immutable,
        "Revisions never change after creation",
    ),
)
