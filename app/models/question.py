from pydantic import BaseModel, Field, field_validator, model_validator


class Question(BaseModel):
    """Pregunta de opción múltiple (exactamente 4 opciones)"""

    prompt: str
    options: list[str] = Field(..., min_length=4, max_length=4)
    correct_index: int = Field(..., ge=0, le=3)

    model_config = {"frozen": True}

    @field_validator("options")
    @classmethod
    def options_not_blank(cls, value: list[str]) -> list[str]:
        if any(not option.strip() for option in value):
            raise ValueError("Options cannot be blank")
        return value

    @model_validator(mode="after")
    def correct_index_in_options(self) -> "Question":
        if self.correct_index >= len(self.options):
            raise ValueError("correct_index out of range")
        return self

    def is_correct(self, index: int) -> bool:
        return index == self.correct_index
