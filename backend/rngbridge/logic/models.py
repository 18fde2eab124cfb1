"""Generator state snapshot model."""
from pydantic import BaseModel, ConfigDict, Field, field_validator

STATE_SIZE = 624
WORD_MASK = 0xFFFFFFFF


class GeneratorState(BaseModel):
    """
    Snapshot of an MT19937 generator.

    words: the 624 unsigned 32-bit state words
    index: next word to emit; 624 means a twist happens on the next draw
    """

    model_config = ConfigDict(frozen=True)

    words: tuple[int, ...] = Field(..., min_length=STATE_SIZE, max_length=STATE_SIZE)
    index: int = Field(..., ge=0, le=STATE_SIZE)

    @field_validator("words")
    @classmethod
    def _words_are_u32(cls, words: tuple[int, ...]) -> tuple[int, ...]:
        for word in words:
            if word < 0 or word > WORD_MASK:
                raise ValueError(f"state word {word} is not an unsigned 32-bit value")
        return words
