from critpath.layout import assign_layout


def test_layers_follow_early_start_and_lanes_follow_input_order():
    pos = assign_layout(["a", "b", "c", "d"], {"a": 3, "b": 0, "c": 3, "d": 10})
    assert pos == {"b": (0, 0), "a": (1, 0), "c": (1, 1), "d": (2, 0)}


def test_layers_are_dense_ranks():
    pos = assign_layout(["x", "y"], {"x": 0, "y": 42})
    assert pos["y"] == (1, 0)


def test_empty():
    assert assign_layout([], {}) == {}
