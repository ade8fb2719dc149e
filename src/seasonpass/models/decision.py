"""Interception decisions.

A decision function returns exactly one of ``Pass``, ``Cancel`` or
``Redirect``. ``Cancel`` means "do not redirect": the request goes out
unmodified. ``Pass`` is returned when the request is outside the
interceptor's URL pattern and was never considered.
"""

from __future__ import annotations

from typing import Annotated, Literal

from pydantic import BaseModel, ConfigDict, Field


class Pass(BaseModel):
    model_config = ConfigDict(frozen=True)

    kind: Literal["pass"] = "pass"


class Cancel(BaseModel):
    model_config = ConfigDict(frozen=True)

    kind: Literal["cancel"] = "cancel"


class Redirect(BaseModel):
    model_config = ConfigDict(frozen=True)

    kind: Literal["redirect"] = "redirect"
    target: str


InterceptDecision = Annotated[Pass | Cancel | Redirect, Field(discriminator="kind")]

PASS = Pass()
CANCEL = Cancel()
