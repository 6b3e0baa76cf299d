"""Integration tests for spacestate.

Tests usage patterns that match how a view layer drives a space tree.
"""
from spacestate import Space, thaw


def test_readme_quick_start_example():
    """Test the quick start example from the package docstring."""
    causes = []
    app = Space({"title": "Todos", "todos": [{"id": "1", "done": False}]})
    app.subscribe(causes.append)

    todos = app.sub_space("todos")
    item = todos.sub_space("1")
    toggle = item.set_state(lambda space, event: {"done": not space.state["done"]})
    toggle(None)

    assert causes == ["initialized", "1#<lambda>"]
    assert app.state["todos"][0]["done"] is True


def test_todo_app_flow():
    """Add, edit, and delete items the way view event handlers would."""
    renders = []
    app = Space({"draft": "", "todos": []}, name="app")
    app.subscribe(lambda cause: renders.append((cause, app.state)))

    todos = app.sub_space("todos")

    def type_draft(space, event):
        return {"draft": event["value"]}

    def add_todo(space, event):
        draft = space.parent_space("app").state["draft"]
        new_item = {"id": str(len(space.state) + 1), "text": draft, "done": False}
        return thaw(space.state) + [new_item]

    on_input = app.set_state(type_draft)
    on_submit = todos.set_state(add_todo)

    on_input({"value": "milk"})
    on_submit(None)
    on_input({"value": "eggs"})
    on_submit(None)

    assert [t["text"] for t in app.state["todos"]] == ["milk", "eggs"]

    eggs = todos.sub_space("2")
    eggs.set_state({"done": True}, "check")
    todos.sub_space("1").set_state(lambda space, event: None, "delete")(None)

    assert app.state["todos"] == ({"id": "2", "text": "eggs", "done": True},)
    assert [cause for cause, _ in renders] == [
        "initialized",
        "app#type_draft",
        "todos#add_todo",
        "app#type_draft",
        "todos#add_todo",
        "2#check",
        "1#delete",
    ]
    # Every render saw a distinct frozen snapshot
    assert renders[1][1]["draft"] == "milk"
    assert renders[0][1]["todos"] == ()


def test_handler_reads_sibling_through_parent():
    """A list item handler reaches sibling state through parent_space()."""
    app = Space({"settings": {"step": 5}, "counters": [{"id": "a", "value": 0}]})
    counter = app.sub_space("counters").sub_space("a")

    def bump(space, event):
        step = space.parent_space("root").state["settings"]["step"]
        return {"value": space.state["value"] + step}

    handler = counter.set_state(bump)
    handler()
    handler()

    assert app.state["counters"][0]["value"] == 10
