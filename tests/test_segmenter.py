"""Tests for splitting bid-package text into trip blocks."""

from pathlib import Path
import sys
import types

if str(Path(__file__).resolve().parents[1]) not in sys.path:
    sys.path.insert(0, str(Path(__file__).resolve().parents[1]))

from bid_package_samples import BID_PACKAGE_TEXT, PREAMBLE, TRIP_7990, TRIP_8181
from pairing_engine.segmenter import is_trip_header, iter_trip_blocks, split_trip_blocks


def test_one_block_per_header_in_document_order() -> None:
    blocks = split_trip_blocks(BID_PACKAGE_TEXT)

    assert [block.header.split()[0] for block in blocks] == ["#7990", "#7995", "#8210", "#8181"]
    assert [block.index for block in blocks] == [0, 1, 2, 3]


def test_blocks_reconstruct_document_without_preamble() -> None:
    blocks = split_trip_blocks(BID_PACKAGE_TEXT)

    assert "".join(block.text for block in blocks) == BID_PACKAGE_TEXT[len(PREAMBLE):]
    assert blocks[0].text == TRIP_7990
    assert blocks[-1].text == TRIP_8181


def test_header_line_numbers_are_one_based() -> None:
    blocks = split_trip_blocks(BID_PACKAGE_TEXT)

    assert blocks[0].line_number == 3
    assert blocks[1].line_number == blocks[0].line_number + len(TRIP_7990.splitlines())


def test_text_without_headers_yields_nothing() -> None:
    assert split_trip_blocks("NYC BASE 220 PILOT PAIRINGS\nno trips here\n") == []
    assert split_trip_blocks("") == []


def test_iter_trip_blocks_is_lazy() -> None:
    blocks = iter_trip_blocks(BID_PACKAGE_TEXT)

    assert isinstance(blocks, types.GeneratorType)
    first = next(blocks)
    assert first.header.startswith("#7990")
    assert len(list(blocks)) == 3


def test_indented_header_still_starts_a_block() -> None:
    text = "   #12345 FR  EFFECTIVE SEP05 ONLY\n A  100  LGA 0800  BOS 0915  1.15\n"

    blocks = split_trip_blocks(text)

    assert len(blocks) == 1
    assert blocks[0].text == text


def test_is_trip_header_requires_number_and_day_code() -> None:
    assert is_trip_header("#7990  MO   EFFECTIVE AUG04 ONLY")
    assert not is_trip_header("#799 MO")
    assert not is_trip_header("#7990")
    assert not is_trip_header("TOTAL CREDIT 10.47TL")
