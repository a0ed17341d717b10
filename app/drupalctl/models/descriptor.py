"""Descriptor file models.

A descriptor is a package's line-oriented ``.info`` text file carrying
``key = "value"`` pairs. The parsed form is only used to compare what a
file carried before and after a stamp.
"""

from dataclasses import dataclass, field


@dataclass(frozen=True, slots=True)
class DescriptorInfo:
    """Key/value pairs read from a descriptor file.

    Attributes:
        fields: Parsed ``key = value`` pairs; a repeated key keeps its last value.
        date: Date from a ``; ... on YYYY-MM-DD`` comment line, if any.
    """

    fields: dict[str, str] = field(default_factory=dict)
    date: str | None = None

    @property
    def version(self) -> str | None:
        """The ``version`` field, if present."""
        return self.fields.get("version")

    def has(self, key: str) -> bool:
        """Check if a field (or ``date``) is present."""
        if key == "date":
            return self.date is not None
        return key in self.fields

    def as_dict(self) -> dict[str, str]:
        """All values as one mapping, ``date`` included when known."""
        values = dict(self.fields)
        if self.date is not None:
            values["date"] = self.date
        return values


@dataclass(frozen=True, slots=True)
class StampMetadata:
    """Provenance appended to descriptor files.

    Attributes:
        version: Display version of the installed package.
        date: Stamp date (YYYY-MM-DD) shown in the comment line.
        project: Project short name, if provenance includes it.
        datestamp: Unix timestamp of the stamp, if provenance includes it.
    """

    version: str
    date: str
    project: str | None = None
    datestamp: str | None = None

    def has(self, key: str) -> bool:
        """Check if a provenance field is set."""
        return getattr(self, key, None) is not None

    def merged_over(self, old: DescriptorInfo) -> "StampMetadata":
        """Fill unset provenance fields from an earlier snapshot; set fields win.

        Metadata built by ``MetadataStamper.metadata_for`` sets every field,
        so the merge only changes anything for caller-supplied metadata
        that leaves ``project`` or ``datestamp`` unset.
        """
        previous = old.as_dict()
        return StampMetadata(
            version=self.version,
            date=self.date,
            project=self.project if self.project is not None else previous.get("project"),
            datestamp=self.datestamp if self.datestamp is not None else previous.get("datestamp"),
        )
