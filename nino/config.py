"""Configuration models for NINO.

Every YAML descriptor kind found in a LINO/PIMO workspace is described here as a
pydantic model, together with the runtime settings of the tool itself.
"""

import os
from dataclasses import dataclass
from enum import Enum
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

from nino.utils.config_loader import load_yaml_with_env


class DescriptorModel(BaseModel):
    """Base for all parsed YAML records: immutable, alias-aware, null-tolerant."""

    model_config = ConfigDict(
        frozen=True,
        populate_by_name=True,
        coerce_numbers_to_str=True,
        extra="ignore",
    )

    @model_validator(mode="before")
    @classmethod
    def _drop_nulls(cls, data: Any) -> Any:
        # An empty YAML key (`columns:`) falls back to the field default
        if isinstance(data, dict):
            return {k: v for k, v in data.items() if v is not None}
        return data


# ============================================
# Tables and relations
# ============================================


class Column(DescriptorModel):
    """A table column and its export type."""

    name: str
    export: str = ""


class Table(DescriptorModel):
    """
    A database table as declared in a `tables.yaml` (or any plain YAML) file.

    Example:
    ```yaml
    version: v1
    tables:
      - name: orders
        keys: [id]
        columns:
          - name: id
            export: numeric
          - name: total
    ```
    """

    name: str
    keys: List[str] = Field(default_factory=list)
    columns: List[Column] = Field(default_factory=list)

    def column(self, name: str) -> Optional[Column]:
        for col in self.columns:
            if col.name == name:
                return col
        return None


class TableSchema(DescriptorModel):
    version: str = ""
    tables: List[Table] = Field(default_factory=list)


class Relation(DescriptorModel):
    """A foreign key edge from a parent table to a child table."""

    name: str
    parent: Table
    child: Table


class RelationSchema(DescriptorModel):
    version: str = ""
    relations: List[Relation] = Field(default_factory=list)


# ============================================
# Data connectors
# ============================================


class PasswordSource(DescriptorModel):
    value_from_env: str = Field(default="", alias="valueFromEnv")


class DataConnector(DescriptorModel):
    """
    One data source or sink.

    Example:
    ```yaml
    dataconnectors:
      - name: source
        url: postgresql://user@host:5432/db
        readonly: true
        password:
          valueFromEnv: ADMIN
    ```
    """

    name: str
    url: str = ""
    readonly: bool = False
    password: PasswordSource = Field(default_factory=PasswordSource)


class DataConnectorSchema(DescriptorModel):
    version: str = ""
    dataconnectors: List[DataConnector] = Field(default_factory=list)


# ============================================
# Masking descriptors
# ============================================


class MaskType(str, Enum):
    """Kinds of mask directive shown on the graph."""

    REGEX = "regex"
    RANDOM_CHOICE = "randomChoiceInUri"
    INCREMENTAL = "incremental"
    MULTIPLE = "multiple"


@dataclass(frozen=True)
class MaskInfo:
    mask_type: MaskType
    mask_value: str


class Selector(DescriptorModel):
    jsonpath: str = ""


class IncrementalMask(DescriptorModel):
    start: int = 0
    increment: int = 0


class Mask(DescriptorModel):
    regex: str = ""
    random_choice_in_uri: str = Field(default="", alias="randomChoiceInUri")
    incremental: IncrementalMask = Field(default_factory=IncrementalMask)


class SubMask(DescriptorModel):
    model_config = ConfigDict(extra="allow")

    add_transient: str = Field(default="", alias="add-transient")
    random_choice_in_uri: str = Field(default="", alias="randomChoiceInUri")
    template: str = ""


class MaskingRule(DescriptorModel):
    """A column selector paired with one mask directive (or a list of sub-masks)."""

    selector: Selector = Field(default_factory=Selector)
    mask: Mask = Field(default_factory=Mask)
    masks: List[SubMask] = Field(default_factory=list)

    @property
    def column(self) -> str:
        """Column targeted by the selector, `$.id` and `id` both name column `id`."""
        path = self.selector.jsonpath
        if path.startswith("$."):
            return path[2:]
        return path

    def describe(self) -> Optional[MaskInfo]:
        """Return the first populated directive, or None when no directive applies."""
        if self.mask.regex:
            return MaskInfo(MaskType.REGEX, self.mask.regex)
        if self.mask.random_choice_in_uri:
            return MaskInfo(MaskType.RANDOM_CHOICE, self.mask.random_choice_in_uri)
        if self.mask.incremental.increment != 0:
            inc = self.mask.incremental
            return MaskInfo(MaskType.INCREMENTAL, f"start={inc.start}, step={inc.increment}")
        if self.masks:
            return MaskInfo(MaskType.MULTIPLE, "see descriptor")
        return None


class DescriptorSchema(DescriptorModel):
    """Contents of a `<table>-descriptor.yaml` masking file."""

    version: str = ""
    seed: int = 0
    masking: List[MaskingRule] = Field(default_factory=list)

    def rules_by_column(self) -> Dict[str, MaskInfo]:
        """Map column name to its mask; rules without a directive are left out."""
        rules: Dict[str, MaskInfo] = {}
        for rule in self.masking:
            info = rule.describe()
            if info is not None:
                rules[rule.column] = info
        return rules


# ============================================
# Analysis metrics
# ============================================


class LengthFrequency(DescriptorModel):
    length: int
    freq: float = 0.0


class StringMetric(DescriptorModel):
    lengths: List[LengthFrequency] = Field(default_factory=list)


class NumericMetric(DescriptorModel):
    mean: float = 0.0


class ColumnMainMetric(DescriptorModel):
    count: int = 0
    min: Any = None


class TableMainMetric(DescriptorModel):
    count: int = 0


class AnalyzeColumn(DescriptorModel):
    name: str
    main_metric: ColumnMainMetric = Field(default_factory=ColumnMainMetric, alias="mainMetric")
    string_metric: StringMetric = Field(default_factory=StringMetric, alias="stringMetric")
    numeric_metric: NumericMetric = Field(default_factory=NumericMetric, alias="numericMetric")

    @property
    def plottable(self) -> bool:
        return len(self.string_metric.lengths) > 0


class AnalyzeTable(DescriptorModel):
    name: str
    columns: List[AnalyzeColumn] = Field(default_factory=list)
    main_metric: TableMainMetric = Field(default_factory=TableMainMetric, alias="mainMetric")

    @property
    def count(self) -> int:
        """Row count, falling back to the first column's count."""
        if self.main_metric.count:
            return self.main_metric.count
        if self.columns:
            return self.columns[0].main_metric.count
        return 0

    def column(self, name: str) -> Optional[AnalyzeColumn]:
        for col in self.columns:
            if col.name == name:
                return col
        return None


class AnalyzeSchema(DescriptorModel):
    database: str = ""
    tables: List[AnalyzeTable] = Field(default_factory=list)

    def table(self, name: str) -> Optional[AnalyzeTable]:
        for table in self.tables:
            if table.name == name:
                return table
        return None


# ============================================
# Playbooks
# ============================================


class PlaybookTask(DescriptorModel):
    name: str = ""


class PlaybookEntity(DescriptorModel):
    name: str = ""


class RoleVars(DescriptorModel):
    entities: List[PlaybookEntity] = Field(default_factory=list)


class PlaybookRole(DescriptorModel):
    name: str = ""
    vars: RoleVars = Field(default_factory=RoleVars)

    @model_validator(mode="before")
    @classmethod
    def _bare_role_name(cls, data: Any) -> Any:
        # `roles: [common]` is shorthand for `roles: [{name: common}]`
        if isinstance(data, str):
            return {"name": data}
        return data


class Play(DescriptorModel):
    name: str = ""
    hosts: str = ""
    vars: Dict[str, Any] = Field(default_factory=dict)
    pre_tasks: List[PlaybookTask] = Field(default_factory=list)
    roles: List[PlaybookRole] = Field(default_factory=list)

    @field_validator("hosts", mode="before")
    @classmethod
    def _join_hosts(cls, value: Any) -> Any:
        if isinstance(value, list):
            return ",".join(str(v) for v in value)
        return value


class Playbook(DescriptorModel):
    """An ordered list of plays; only the first one is drawn."""

    plays: List[Play] = Field(default_factory=list)

    @model_validator(mode="before")
    @classmethod
    def _from_list(cls, data: Any) -> Any:
        if isinstance(data, list):
            return {"plays": data}
        if isinstance(data, dict) and "plays" not in data:
            raise ValueError("a playbook must be a list of plays")
        return data


# ============================================
# Runtime settings
# ============================================


class NinoSettings(BaseModel):
    """
    Runtime settings for the CLI and the web API.

    Resolution order: defaults, then an optional YAML file, then `NINO_<FIELD>`
    environment variables, then explicit overrides (CLI flags).

    Example:
    ```yaml
    port: 2442
    tool_timeout: 30
    environments:
      ci:
        dot_binary: /usr/local/bin/dot
    ```
    """

    host: str = Field(default="127.0.0.1", description="Interface the web API binds to")
    port: int = Field(default=2442, description="Port for the web API")
    tool_timeout: float = Field(
        default=60.0, gt=0, description="Seconds before an external tool is killed"
    )
    dot_binary: str = Field(default="dot", description="Graphviz layout executable")
    pimo_binary: str = Field(default="pimo", description="Masking tool executable")
    lino_binary: str = Field(default="lino", description="Data pull tool executable")
    shell: str = Field(default="bash", description="Shell used for script execution")
    log_level: str = Field(default="INFO", description="DEBUG, INFO, WARNING or ERROR")
    structured_logs: bool = Field(default=False, description="Emit JSON log lines")

    @field_validator("log_level")
    @classmethod
    def _upper_level(cls, value: str) -> str:
        value = value.upper()
        if value not in ("DEBUG", "INFO", "WARNING", "ERROR"):
            raise ValueError(f"Unknown log level: {value}")
        return value

    @classmethod
    def load(
        cls,
        path: Optional[str] = None,
        env: Optional[str] = None,
        overrides: Optional[Dict[str, Any]] = None,
    ) -> "NinoSettings":
        data: Dict[str, Any] = {}
        if path:
            data.update(load_yaml_with_env(path, env=env))

        for name in cls.model_fields:
            value = os.environ.get(f"NINO_{name.upper()}")
            if value is not None:
                data[name] = value

        for name, value in (overrides or {}).items():
            if value is not None:
                data[name] = value

        return cls(**data)
