"""Tests for dependency-closure resolution."""

import pytest

from common.errors import DanglingDependency, MissingResolveNode
from metadata.models import parse_metadata
from metadata.resolver import resolve, resolve_named

REGISTRY = "registry+https://github.com/rust-lang/crates.io-index"


def _snapshot(graph, registry=()):
    """Build a Metadata snapshot from ``{name: [dep names]}``.

    Package ids are ``"<name> id"`` so tests can tell ids and names apart.
    """
    names = set(graph) | {d for deps in graph.values() for d in deps}
    packages = [
        {
            "id": f"{name} id",
            "name": name,
            "source": REGISTRY if name in registry else None,
            "manifest_path": f"/src/lib{name}/Cargo.toml",
        }
        for name in sorted(names)
    ]
    nodes = [
        {"id": f"{name} id", "dependencies": [f"{d} id" for d in graph.get(name, [])]}
        for name in sorted(names)
    ]
    return parse_metadata({"packages": packages, "resolve": {"nodes": nodes}})


def _names(crates):
    return [p.name for p in crates]


class TestResolveOrdering:
    """Test dependency-before-dependent ordering."""

    def test_chain_with_registry_leaf(self):
        """Test A -> B -> C local plus A -> D from the registry."""
        md = _snapshot({"A": ["B", "D"], "B": ["C"], "C": []}, registry={"D"})
        assert _names(resolve(md, "A id")) == ["C", "B", "A"]

    def test_root_alone(self):
        """Test a root without dependencies."""
        md = _snapshot({"A": []})
        assert _names(resolve(md, "A id")) == ["A"]

    def test_dependencies_before_dependents(self):
        """Test every local dependency precedes each dependent."""
        graph = {
            "syntax": ["syntax_pos", "rustc_errors", "serialize", "rustc_data_structures"],
            "syntax_pos": ["serialize", "rustc_data_structures", "arena"],
            "rustc_errors": ["syntax_pos", "serialize", "rustc_data_structures"],
            "rustc_data_structures": ["serialize", "log"],
            "serialize": [],
            "arena": [],
        }
        md = _snapshot(graph, registry={"log"})
        order = _names(resolve(md, "syntax id"))

        assert len(order) == len(set(order))
        assert "log" not in order
        position = {name: i for i, name in enumerate(order)}
        for name, deps in graph.items():
            for dep in deps:
                if dep != "log":
                    assert position[dep] < position[name], (dep, name)
        assert order[-1] == "syntax"

    def test_traversal_follows_listed_order(self):
        """Test siblings are emitted in the order the node lists them."""
        md = _snapshot({"A": ["Z", "M", "B"], "Z": [], "M": [], "B": []})
        assert _names(resolve(md, "A id")) == ["Z", "M", "B", "A"]


class TestResolveDiamonds:
    """Test shared dependencies are visited once."""

    def test_diamond_visited_once(self):
        """Test A -> B, A -> C, B -> D, C -> D yields D once."""
        md = _snapshot({"A": ["B", "C"], "B": ["D"], "C": ["D"], "D": []})
        assert _names(resolve(md, "A id")) == ["D", "B", "C", "A"]

    def test_first_seen_path_wins(self):
        """Test the shared crate is placed by the first path reaching it."""
        md = _snapshot({"A": ["C", "B"], "B": ["S"], "C": ["S"], "S": []})
        assert _names(resolve(md, "A id")) == ["S", "C", "B", "A"]

    def test_seen_is_keyed_by_name(self):
        """Test two ids sharing a name are visited once, first one wins."""
        md = parse_metadata({
            "packages": [
                {"id": "root", "name": "root", "source": None, "manifest_path": "/r"},
                {"id": "dup-1", "name": "dup", "source": None, "manifest_path": "/d1"},
                {"id": "dup-2", "name": "dup", "source": None, "manifest_path": "/d2"},
                {"id": "only-2", "name": "only2", "source": None, "manifest_path": "/o"},
            ],
            "resolve": {"nodes": [
                {"id": "root", "dependencies": ["dup-1", "dup-2"]},
                {"id": "dup-1", "dependencies": []},
                {"id": "dup-2", "dependencies": ["only-2"]},
                {"id": "only-2", "dependencies": []},
            ]},
        })
        crates = resolve(md, "root")
        assert [p.id for p in crates] == ["dup-1", "root"]

    def test_cycle_terminates(self):
        """Test a local cycle does not recurse forever."""
        md = _snapshot({"A": ["B"], "B": ["A"]})
        assert _names(resolve(md, "A id")) == ["B", "A"]


class TestResolveLeaves:
    """Test registry packages are never part of the closure."""

    def test_registry_package_not_recursed(self):
        """Test local crates behind a registry crate are not reached."""
        md = _snapshot({"A": ["R"], "R": ["hidden"], "hidden": []}, registry={"R"})
        assert _names(resolve(md, "A id")) == ["A"]

    def test_registry_dependency_node_not_required(self):
        """Test a registry dependency needs no resolve node of its own."""
        md = parse_metadata({
            "packages": [
                {"id": "a", "name": "a", "source": None, "manifest_path": "/a"},
                {"id": "r", "name": "r", "source": REGISTRY, "manifest_path": "/r"},
            ],
            "resolve": {"nodes": [{"id": "a", "dependencies": ["r"]}]},
        })
        assert _names(resolve(md, "a")) == ["a"]


class TestResolveFailures:
    """Test snapshot inconsistencies are fatal."""

    def test_missing_resolve_node(self):
        """Test a local package without a node."""
        md = parse_metadata({
            "packages": [
                {"id": "a", "name": "a", "source": None, "manifest_path": "/a"},
                {"id": "b", "name": "b", "source": None, "manifest_path": "/b"},
            ],
            "resolve": {"nodes": [{"id": "a", "dependencies": ["b"]}]},
        })
        with pytest.raises(MissingResolveNode) as excinfo:
            resolve(md, "a")
        assert excinfo.value.package_id == "b"

    def test_dangling_dependency(self):
        """Test a dependency id with no package."""
        md = parse_metadata({
            "packages": [{"id": "a", "name": "a", "source": None, "manifest_path": "/a"}],
            "resolve": {"nodes": [{"id": "a", "dependencies": ["ghost"]}]},
        })
        with pytest.raises(DanglingDependency):
            resolve(md, "a")

    def test_unknown_root_id(self):
        """Test resolving from an id not in the snapshot."""
        md = _snapshot({"A": []})
        with pytest.raises(DanglingDependency):
            resolve(md, "nope")


class TestResolveNamed:
    """Test resolution by root package name."""

    def test_resolves_by_name(self):
        """Test the root is looked up by name."""
        md = _snapshot({"syntax": ["syntax_pos"], "syntax_pos": []})
        assert _names(resolve_named(md, "syntax")) == ["syntax_pos", "syntax"]

    def test_unknown_name(self):
        """Test a root name absent from the snapshot."""
        md = _snapshot({"syntax": []})
        with pytest.raises(DanglingDependency):
            resolve_named(md, "rustc")
