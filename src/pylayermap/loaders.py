# -*- encoding: utf-8 -*-
# @File   : loaders.py
# @Time   : 2024/10/20 00:12:45
# @Author : Kariko Lin

"""YAML layer stacks, one document per layer.

    ```yaml
    ---  # primary (with `with_primary=True`)
    size: 5
    ---  # get_layer(0)
    colour: blue
    ---  # get_layer(1)
    colour: red
    size: 3
    ```

Note: works on in-memory text only. Reading files is up to the caller.
"""

from typing import TYPE_CHECKING, Any

import yaml
from chardet import detect as guess_codec

if TYPE_CHECKING:
    from .model import LayeredMap

__all__ = ['decode', 'load_layers', 'dump_layers']


def decode(raw: bytes) -> str:
    codec = guess_codec(raw)
    if codec['encoding'] is None or codec['confidence'] < 0.8:
        codec = {'encoding': 'utf-8'}

    # fallbacks
    try:
        return raw.decode(codec['encoding'])
    except (UnicodeDecodeError, LookupError):
        return raw.decode('latin-1')


def load_layers(source: str | bytes) -> list[dict[Any, Any]]:
    """Parse each YAML document into a dict. Empty documents become `{}`.

    Raises `TypeError` if any document isn't a mapping.
    """
    if isinstance(source, bytes):
        source = decode(source)
    ret = []
    for i, doc in enumerate(yaml.load_all(source, yaml.FullLoader)):
        if doc is None:
            doc = {}
        if not isinstance(doc, dict):
            raise TypeError(
                f'YAML document #{i} is a {type(doc).__name__}, '
                'which cannot be a layer.')
        ret.append(doc)
    return ret


def dump_layers(lmap: 'LayeredMap[Any, Any]') -> str:
    """Dump primary, then every secondary layer, as a YAML stream.

    Shadowed pairs are kept, so `LayeredMap.from_yaml(..., with_primary=True)`
    gives back the same stack.
    """
    docs = [dict(lmap.get_primary())]
    docs.extend(dict(i) for i in lmap.get_layers())
    return yaml.dump_all(
        docs, explicit_start=True, allow_unicode=True, sort_keys=False)
