from __future__ import annotations

from ..types import FillPlan, LoginForm, SavePlan, SaveDataType


def build_fill_plan(form: LoginForm, match_key: str) -> FillPlan:
    return FillPlan(
        form=form,
        requested_match_key=match_key,
        offers_generated_password=bool(form.new_password_fields),
    )


def build_save_plan(form: LoginForm) -> SavePlan:
    data_types: set[SaveDataType] = {"password"}
    if form.username_field is not None:
        data_types.add("username")
    return SavePlan(
        form=form,
        addresses_to_reread=frozenset(field.address for field in form.fields if field.role != "irrelevant"),
        data_types=frozenset(data_types),
    )
