"""Column contracts for keyed-row uploads.

Each pipeline that reads header-keyed rows declares its fields once as
``ColumnSpec`` entries. ``bind_columns`` resolves the whole contract against
the upload's header row at pipeline entry, so per-row code reads typed fields
through a ``ColumnMap`` instead of probing keys ad hoc.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Hashable, Mapping, Sequence, Tuple

from .errors import MissingColumnError
from .headers import resolve_column


@dataclass(frozen=True)
class ColumnSpec:
    """Metadata describing one logical field and the header labels it accepts."""

    name: str
    candidates: Tuple[str, ...]
    required: bool = False
    exact: bool = False

    @property
    def label(self) -> str:
        return self.candidates[0] if self.candidates else self.name


@dataclass
class ColumnMap:
    """Field name to resolved column (index or key) for one upload."""

    columns: dict[str, Hashable] = field(default_factory=dict)

    def has(self, name: str) -> bool:
        return self.columns.get(name) is not None

    def get(self, row, name: str, default=None):
        ref = self.columns.get(name)
        if ref is None:
            return default
        if isinstance(row, Mapping):
            return row.get(ref, default)
        if isinstance(ref, int) and ref < len(row):
            return row[ref]
        return default


def bind_columns(specs: Sequence[ColumnSpec], headers: Sequence | Mapping) -> ColumnMap:
    """
    Resolve every spec against ``headers`` in declaration order.

    A header bound to one field is not offered to later fields. Missing
    required fields are collected and raised together.
    """
    bound: dict[str, Hashable] = {}
    claimed: set[Hashable] = set()
    missing: list[str] = []
    for spec in specs:
        ref = resolve_column(spec.candidates, headers, exclude=claimed, exact=spec.exact)
        if ref is None:
            if spec.required:
                missing.append(spec.label)
            continue
        bound[spec.name] = ref
        claimed.add(ref)
    if missing:
        raise MissingColumnError(missing)
    return ColumnMap(bound)


ROSTER_COLUMNS: Tuple[ColumnSpec, ...] = (
    ColumnSpec("chapter", ("chapter", "chapter name"), required=True),
    ColumnSpec("member_number", ("member number", "member #", "member no", "member")),
    ColumnSpec("first_name", ("first name", "first")),
    ColumnSpec("last_name", ("last name", "last")),
    ColumnSpec("initiated_date", ("initiated date", "initiation date", "initiated")),
    ColumnSpec("years_paid", ("years paid", "yearspaid", "financial through")),
    ColumnSpec("status", ("status",)),
)

PIA_COLUMNS: Tuple[ColumnSpec, ...] = (
    ColumnSpec("chapter", ("chapter", "chapter name"), required=True),
    ColumnSpec("date", ("program date", "activity date", "date")),
    ColumnSpec("hours", ("total hours", "hours")),
    # Money columns must bind before the category flags.
    ColumnSpec("black_spend", ("black spend amount", "black spend", "black dollars spent", "black-owned spend")),
    ColumnSpec(
        "scholarship",
        (
            "scholarship funds disbursed",
            "scholarship funds distributed",
            # Misspelling found in historical uploads; keep accepting it.
            "scholarship funds dispursed",
            "scholarship amount",
            "scholarship",
        ),
    ),
    ColumnSpec(
        "brothers",
        (
            "sigma brothers attending",
            "brothers attending",
            "number of sigmas",
            "sigmas attending",
            "# brothers",
            "# of brothers",
            "brothers",
        ),
    ),
    ColumnSpec("description", ("program description", "description", "activity description", "notes")),
    ColumnSpec("program", ("program type", "program")),
    ColumnSpec("bbb", ("bbb", "bigger & better business", "bigger and better business")),
    ColumnSpec("education", ("education",)),
    ColumnSpec("social", ("social action", "social")),
    ColumnSpec("sbc", ("sbc", "sigma beta club")),
)


def _alumni(name: str, *labels: str, required: bool = False) -> ColumnSpec:
    return ColumnSpec(name, labels, required=required, exact=True)


ALUMNI_COLUMNS: Tuple[ColumnSpec, ...] = (
    _alumni("member_number", "Member #", "Member Number", required=True),
    _alumni("full_name", "Full Name"),
    _alumni("email", "Email"),
    _alumni("affiliated_chapter", "Affiliated Chapter"),
    _alumni("affiliated_chapter_number", "Affiliated Chapter Number"),
    _alumni("affiliated_chapter_region", "Affiliated Chapter Region"),
    _alumni("affiliated_chapter_university", "Affiliated Chapter University/Location"),
    _alumni("initiated_chapter", "Initiated Chapter"),
    _alumni("initiated_chapter_region", "Initiated Chapter Region"),
    _alumni("initiated_chapter_university", "Initiated Chapter University/Location"),
    _alumni("initiated_year", "Initiated Year"),
    _alumni("initiated_date", "Initiated Date"),
    _alumni("member_type", "Member Type"),
    _alumni("life_member_type", "Life Member Type"),
    _alumni("currently_financial", "Currently Financial"),
    _alumni("consecutive_dues", "Consecutive Dues"),
    _alumni("financial_through", "Financial Through"),
    _alumni("career_field_code", "Career Field Code"),
    _alumni("career_field", "Career Field"),
    _alumni("military_affiliation", "Military Affiliation"),
    _alumni("active_duty", "Active Duty"),
    _alumni("last_rank_achieved", "Last Rank Achieved"),
    _alumni("former_sbc", "Former SBC"),
    _alumni("dsc_member", "DSC Member"),
    _alumni("dsc_number", "DSC Number"),
    _alumni("al_locke_scholar", "AL Locke Scholar"),
    _alumni("al_locke_scholar_number", "AL Locke Scholar Number"),
    _alumni("jt_floyd_hof_member", "JT Floyd HoF Member"),
)
