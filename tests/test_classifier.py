from __future__ import annotations

import pytest

from autofill.core.classifier import FieldClassifier, normalise_hint
from autofill.tree import walk
from autofill.types import Node


def make_input(**kwargs: object) -> Node:
    kwargs.setdefault("address", "field")
    kwargs.setdefault("kind", "text")
    return Node(**kwargs)  # type: ignore[arg-type]


def test_explicit_password_hint_beats_username_id_name() -> None:
    node = make_input(hints=("password",), id_name="username")
    field = FieldClassifier().classify_node(node)
    assert field.role == "current_password"
    assert field.confidence == 1


def test_contradictory_hints_prefer_password() -> None:
    field = FieldClassifier().classify_node(make_input(hints=("emailAddress", "password")))
    assert field.role == "current_password"


@pytest.mark.parametrize("hint", ["username", "emailAddress", "email", "new-username"])
def test_username_hints(hint: str) -> None:
    field = FieldClassifier().classify_node(make_input(hints=(hint,)))
    assert field.role == "username"
    assert field.confidence == 1


def test_hint_normalisation() -> None:
    assert normalise_hint("New-Password") == "newpassword"
    assert normalise_hint("current_password") == "currentpassword"


def test_declared_kind_is_second_rule() -> None:
    classifier = FieldClassifier()
    password = classifier.classify_node(make_input(kind="password", id_name="user_name"))
    email = classifier.classify_node(make_input(kind="email"))
    assert (password.role, password.confidence) == ("current_password", 2)
    assert (email.role, email.confidence) == ("username", 2)


def test_unrelated_hint_falls_through_to_kind() -> None:
    field = FieldClassifier().classify_node(make_input(kind="password", hints=("postalCode",)))
    assert (field.role, field.confidence) == ("current_password", 2)


def test_text_heuristic_order_id_then_label_then_hint() -> None:
    classifier = FieldClassifier()
    by_id = classifier.classify_node(make_input(id_name="login_user", label_text="Password"))
    by_label = classifier.classify_node(make_input(label_text="Your PWD", hint_text="e-mail"))
    by_hint = classifier.classify_node(make_input(hint_text="Email"))
    assert (by_id.role, by_id.confidence) == ("username", 3)
    assert by_label.role == "current_password"
    assert by_hint.role == "username"


def test_password_keyword_checked_before_username_keyword() -> None:
    field = FieldClassifier().classify_node(make_input(id_name="user_password"))
    assert field.role == "current_password"


def test_default_is_irrelevant() -> None:
    field = FieldClassifier().classify_node(make_input(id_name="first_name", label_text="Name"))
    assert (field.role, field.confidence) == ("irrelevant", 4)


@pytest.mark.parametrize(
    "node",
    [
        Node(address="container", id_name="login_form"),
        make_input(kind="password", is_visible=False),
        make_input(kind="password", is_focusable=False),
        make_input(id_name="url_bar", hints=("username",)),
        make_input(hint_text="Search users"),
    ],
)
def test_non_candidates_are_irrelevant(node: Node) -> None:
    assert FieldClassifier().classify_node(node).role == "irrelevant"


def test_classify_keeps_walk_order_and_context() -> None:
    tree = Node(
        address="root",
        children=(
            Node(address="form", html_tag="form", children=(make_input(address="pw", kind="password"),)),
        ),
    )
    nodes = list(FieldClassifier().classify(walk(tree)))
    assert [node.address for node in nodes] == ["root", "form", "pw"]
    assert nodes[1].html_tag == "form"
    assert nodes[2].ancestors == ("root", "form")
    assert nodes[2].field.role == "current_password"
