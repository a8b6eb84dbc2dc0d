from pydantic import BaseModel, Field, model_validator
from typing import List
from humance.services.scoring import validate_tiers


class BonusRuleSchema(BaseModel):
    min_score: float
    max_score: float
    bonus_percentage: float = Field(..., ge=0)


class BonusParameters(BaseModel):
    rules: List[BonusRuleSchema]

    @model_validator(mode="after")
    def sorted_without_overlaps(self):
        self.rules = validate_tiers(self.rules)
        return self


class KpiBonusRuleSchema(BaseModel):
    min_score: float
    max_score: float
    bonus_value_leader: float = Field(..., ge=0)
    bonus_value_led: float = Field(..., ge=0)


class KpiBonusParameters(BaseModel):
    rules: List[KpiBonusRuleSchema]

    @model_validator(mode="after")
    def sorted_without_overlaps(self):
        self.rules = validate_tiers(self.rules)
        return self
