"""
Data structures of the AN01 parser.

Input side:
    `Workbook` / `Sheet` are plain frozen dataclasses holding the decoded grid
    of every sheet. A cell is a `CellValue`: either text (`str`, the empty
    string standing for an empty cell) or a number (`int` / `float`).

Output side:
    `GlobalAnalysisResult` and its children are immutable pydantic models.
    Python attributes are snake_case; `model_dump(by_alias=True)` produces the
    camelCase keys consumed by the front-end (`lotName`, `amountTTC`, ...).
"""

from dataclasses import dataclass, field
from typing import Dict, List, Optional, Sequence, Union

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from .constants import DEFAULT_CONSULTATION, DEFAULT_METADATA_VALUE, DEFAULT_TVA

CellValue = Union[str, int, float]
Row = Sequence[CellValue]

# Score of a technical criterion: numeric when parseable, raw text otherwise
Score = Union[float, str]
MaxScore = Union[int, float, str]


@dataclass(frozen=True)
class Sheet:
    """One worksheet: its name and a rectangular grid of cells."""

    name: str
    rows: List[List[CellValue]] = field(default_factory=list)


@dataclass(frozen=True)
class Workbook:
    """Ordered collection of sheets decoded from one uploaded file."""

    sheets: List[Sheet] = field(default_factory=list)

    @property
    def sheet_names(self) -> List[str]:
        return [sheet.name for sheet in self.sheets]

    def get_sheet(self, name: str) -> Sheet:
        for sheet in self.sheets:
            if sheet.name == name:
                return sheet
        raise KeyError(name)


class _FrozenModel(BaseModel):
    model_config = ConfigDict(
        frozen=True,
        populate_by_name=True,
        alias_generator=to_camel,
    )


class Metadata(_FrozenModel):
    """Header block of a lot sheet."""

    consultation: str = DEFAULT_CONSULTATION
    date: str = DEFAULT_METADATA_VALUE
    description: str = DEFAULT_METADATA_VALUE
    buyer: str = DEFAULT_METADATA_VALUE
    requester: str = DEFAULT_METADATA_VALUE
    tva: str = DEFAULT_TVA


class Offer(_FrozenModel):
    """
    One bidder's line of the offer table.

    `id` is the zero-based row index in the source sheet. Ranks use 99 as
    the "not present" sentinel; `amount_ttc` is always strictly positive.
    """

    id: int
    name: str
    rank_final: int
    score_final: float
    rank_financial: int
    score_financial: float
    rank_technical: int
    score_technical: float
    amount_ttc: float = Field(alias="amountTTC")


class Stats(_FrozenModel):
    average: float = 0.0
    max: float = 0.0
    min: float = 0.0
    winner: Optional[Offer] = None
    saving_amount: float = 0.0
    saving_percent: float = 0.0


class TechnicalCriterion(_FrozenModel):
    name: str
    score: Score
    max_score: Optional[MaxScore] = None
    comment: Optional[str] = None


class CandidateTechnicalAnalysis(_FrozenModel):
    """Technical scores of one candidate; `candidate_name` equals an `Offer.name` of the lot."""

    candidate_name: str
    criteria: List[TechnicalCriterion] = Field(default_factory=list)


class Lot(_FrozenModel):
    lot_name: str
    metadata: Metadata
    offers: List[Offer]
    stats: Stats
    technical_analysis: Optional[List[CandidateTechnicalAnalysis]] = None


class GlobalAnalysisResult(_FrozenModel):
    lots: List[Lot]
    global_metadata: Dict[str, str] = Field(default_factory=dict)
