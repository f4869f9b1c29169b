from pathlib import Path

from pydantic import BaseModel, ConfigDict, Field


class Settings(BaseModel):
    """
    Per-run settings handed to a driver.

    Only `source` is interpreted by the codec. Any other keyword is kept as a
    downstream option and passed through unmodified.
    """

    source: Path = Field(
        ...,
        description="Path of the FITS file to read, optionally suffixed with a data unit index, e.g. 'image.fits[1]'",
    )

    model_config = ConfigDict(extra="allow", frozen=True)

    @property
    def options(self) -> dict:
        """The downstream options, i.e. everything except `source`."""
        return dict(self.model_extra or {})
