# -*- encoding: utf-8 -*-
# @File   : __init__.py
# @Time   : 2024/10/19 21:35:40
# @Author : Kariko Lin

import logging

from .model import LayeredMap, DuplicateKeyError
from .loaders import decode, load_layers, dump_layers

__all__ = [
    'LayeredMap', 'DuplicateKeyError',
    'decode', 'load_layers', 'dump_layers'
]

logging.basicConfig(level=logging.INFO,
                    format='[%(asctime)s] %(levelname)s: %(message)s')
