"""
Tests for TreeConfig and Node.
"""

import json

import pytest

from nestedset.core.config import TreeConfig
from nestedset.core.exceptions import DbException
from nestedset.core.node import Node
from nestedset.core.types import ALWAYS, eq


class TestTreeConfig:
    """Test cases for TreeConfig."""

    def test_defaults(self):
        config = TreeConfig()

        assert config.root_column == "root_id"
        assert config.parent_column == "parent_id"
        assert config.left_column == "lft"
        assert config.right_column == "rgt"
        assert config.depth_column == "depth"
        assert config.scope is None

    def test_custom_columns(self):
        config = TreeConfig(left_column="foo", right_column="bar", depth_column="niveau")

        assert config.left_column == "foo"
        assert config.right_column == "bar"
        assert config.depth_column == "niveau"
        assert config.columns == ("root_id", "parent_id", "foo", "bar", "niveau")

    def test_scope_gets_id_suffix(self):
        assert TreeConfig(scope="project").scope == "project_id"
        assert TreeConfig(scope="project_id").scope == "project_id"

    def test_scope_condition(self):
        config = TreeConfig(scope="project")

        assert config.scope_condition(1) == eq("project_id", 1)
        assert str(config.scope_condition(1)) == "project_id = 1"
        assert str(config.scope_condition(None)) == "project_id IS NULL"

    def test_scope_condition_without_scope(self):
        condition = TreeConfig().scope_condition(1)

        assert condition is ALWAYS
        assert str(condition) == "(1=1)"

    def test_to_and_from_dict(self):
        config = TreeConfig(scope="project", left_column="l")
        assert TreeConfig.from_dict(config.to_dict()) == config

    def test_from_dict_ignores_unknown_keys(self):
        config = TreeConfig.from_dict({"left_column": "l", "colour": "blue"})
        assert config.left_column == "l"

    def test_save_and_load(self, tmp_path):
        path = tmp_path / "tree.json"
        config = TreeConfig(scope="project", depth_column="level")
        config.save(path)

        data = json.loads(path.read_text())
        assert data["version"] == "1.0"
        assert data["tree"]["scope"] == "project_id"
        assert TreeConfig.load(path) == config
        assert not (tmp_path / "tree.tmp").exists()

    def test_load_flat_file(self, tmp_path):
        path = tmp_path / "tree.json"
        path.write_text(json.dumps({"right_column": "r"}))

        assert TreeConfig.load(path).right_column == "r"

    def test_load_missing_file(self, tmp_path):
        with pytest.raises(DbException, match="not found"):
            TreeConfig.load(tmp_path / "missing.json")

    def test_load_corrupt_file(self, tmp_path):
        path = tmp_path / "tree.json"
        path.write_text("{not json")

        with pytest.raises(DbException, match="Failed to load"):
            TreeConfig.load(path)


class TestNode:
    """Test cases for Node."""

    def setup_method(self):
        """Set up test fixtures."""
        self.config = TreeConfig(scope="project")
        self.row = {
            "id": 3, "name": "Daughter", "project_id": 1,
            "root_id": 1, "parent_id": 1, "lft": 2, "rgt": 3, "depth": 1,
        }

    def test_from_row(self):
        node = Node.from_row(self.row, self.config)

        assert node.id == 3
        assert node.parent_id == 1
        assert node.root_id == 1
        assert (node.left, node.right) == (2, 3)
        assert node.depth == 1
        assert node.scope_key == 1
        assert node.attributes == {"name": "Daughter"}
        assert node.get("name") == "Daughter"
        assert node.get("missing", "x") == "x"

    def test_null_parent_reads_as_root(self):
        self.row["parent_id"] = None
        node = Node.from_row(self.row, self.config)

        assert node.parent_id == 0
        assert node.is_root()
        assert not node.is_child()

    def test_child(self):
        node = Node.from_row(self.row, self.config)
        assert node.is_child()
        assert node.level == 1

    def test_might_have_descendants(self):
        leaf = Node(id=1, parent_id=0, root_id=1, left=1, right=2, depth=0)
        branch = Node(id=1, parent_id=0, root_id=1, left=1, right=4, depth=0)

        assert leaf.width == 1
        assert not leaf.might_have_descendants()
        assert branch.might_have_descendants()

    def test_str(self):
        node = Node.from_row(self.row, self.config)
        assert str(node) == "Node('Daughter' #3 [2,3] depth=1)"
