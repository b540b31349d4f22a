"""Decoder for the self-describing Huffman blocks used throughout the game data."""

from typing import List, NamedTuple, Union

from .reader import BitReader


class HuffmanNode(NamedTuple):
    """Internal tree node. Leaves are plain byte values."""

    left: "HuffmanTree"
    right: "HuffmanTree"


HuffmanTree = Union[HuffmanNode, int]


def read_tree(reader: BitReader) -> HuffmanTree:
    """
    Reads a tree stored in pre-order.

    A 1 bit is followed by an 8 bit leaf value. A 0 bit introduces an
    internal node: the left subtree, one separator bit, then the right subtree.

    Any depth is accepted; a tree that never closes raises EndOfDataError.
    """
    # Open internal nodes, each holding its left subtree once complete
    stack: List[List[HuffmanTree]] = []
    while True:
        if not reader.read_bit():
            stack.append([])
            continue
        node: HuffmanTree = reader.read_uint8()
        while stack:
            parent = stack[-1]
            if not parent:
                parent.append(node)
                reader.read_bit()
                break
            stack.pop()
            node = HuffmanNode(parent[0], node)
        else:
            return node


def decode_huffman(reader: BitReader, size: int) -> bytes:
    """
    Reads a tree followed by ``size`` encoded bytes, then realigns the
    reader to the next byte boundary.
    """
    root = read_tree(reader)
    output = bytearray(size)
    for i in range(size):
        node = root
        while isinstance(node, HuffmanNode):
            node = node.right if reader.read_bit() else node.left
        output[i] = node
    reader.sync()
    return bytes(output)
