"""
Tests for YAML layer loading and dumping.

Tests verify that:
- Each YAML document becomes one layer
- Byte input is decoded before parsing
- A dumped stack loads back to the same stack
"""

import pytest

import pylayermap.loaders as loaders
import pylayermap.model as model

STACK = """\
---
size: 5
---
colour: blue
---
colour: red
size: 3
"""


class TestDecode:
    """Tests for decode."""

    def test_ascii(self) -> None:
        """Plain ASCII passes through."""
        assert loaders.decode(b'a: 1\n') == 'a: 1\n'

    def test_utf8_bom(self) -> None:
        """A UTF-8 BOM is recognised and stripped."""
        raw = '颜色: 红\n'.encode('utf-8-sig')
        assert loaders.decode(raw) == '颜色: 红\n'

    def test_empty(self) -> None:
        """Empty input decodes to an empty string."""
        assert loaders.decode(b'') == ''


class TestLoadLayers:
    """Tests for load_layers."""

    def test_one_layer_per_document(self) -> None:
        """Documents load in stream order."""
        layers = loaders.load_layers(STACK)
        assert layers == [
            {'size': 5}, {'colour': 'blue'}, {'colour': 'red', 'size': 3}]

    def test_bytes_source(self) -> None:
        """Bytes are decoded first."""
        assert loaders.load_layers(STACK.encode()) == loaders.load_layers(STACK)

    def test_empty_document(self) -> None:
        """An empty document is an empty layer."""
        assert loaders.load_layers('---\n---\na: 1\n') == [{}, {'a': 1}]

    def test_empty_stream(self) -> None:
        """No documents means no layers."""
        assert loaders.load_layers('') == []

    def test_rejects_non_mapping(self) -> None:
        """Lists and scalars cannot be layers."""
        with pytest.raises(TypeError, match='#1'):
            loaders.load_layers('a: 1\n---\n- x\n- y\n')


class TestFromYaml:
    """Tests for LayeredMap.from_yaml."""

    def test_all_secondary(self) -> None:
        """By default every document is a secondary layer."""
        lm = model.LayeredMap.from_yaml(STACK)
        assert lm.layer_count == 4
        assert dict(lm.get_primary()) == {}
        assert lm['size'] == 5
        assert lm['colour'] == 'blue'

    def test_with_primary(self) -> None:
        """The first document can seed primary."""
        lm = model.LayeredMap.from_yaml(STACK, with_primary=True)
        assert lm.layer_count == 3
        assert dict(lm.get_primary()) == {'size': 5}
        lm.remove('size')
        assert lm['size'] == 3

    def test_with_primary_empty_stream(self) -> None:
        """An empty stream gives an empty map."""
        lm = model.LayeredMap.from_yaml('', with_primary=True)
        assert lm.layer_count == 1
        assert len(lm) == 0


class TestDumpLayers:
    """Tests for dump_layers."""

    def test_round_trip(self) -> None:
        """Dumping then loading keeps primary, layers and shadowed pairs."""
        lm = model.LayeredMap({'colour': 'blue'}, {'colour': 'red', 'size': 3})
        lm.add('size', 5)
        lm.add('名字', '坦克')
        text = loaders.dump_layers(lm)
        assert '名字' in text

        back = model.LayeredMap.from_yaml(text, with_primary=True)
        assert back.to_dict() == lm.to_dict()
        assert [dict(i) for i in back.get_layers()] == [
            {'colour': 'blue'}, {'colour': 'red', 'size': 3}]

    def test_empty_map(self) -> None:
        """An empty map still dumps its primary document."""
        text = loaders.dump_layers(model.LayeredMap())
        assert loaders.load_layers(text) == [{}]
