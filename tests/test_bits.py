import pytest

from rockstar_halos.bits import BitArray


def test_new_array_is_clear():
    bits = BitArray(20)
    assert [bits.test(i) for i in range(20)] == [False] * 20


def test_set_only_affects_one_bit():
    bits = BitArray(32)
    bits.set(9)
    assert bits.test(9)
    assert [i for i in range(32) if bits.test(i)] == [9]


def test_clear_resets_bit_and_leaves_others():
    bits = BitArray(16)
    for i in (3, 4, 5):
        bits.set(i)
    bits.clear(4)
    assert [i for i in range(16) if bits.test(i)] == [3, 5]


def test_clear_all():
    bits = BitArray(100)
    for i in range(0, 100, 7):
        bits.set(i)
    bits.clear_all()
    assert not any(bits.test(i) for i in range(100))


def test_len_and_contains():
    bits = BitArray(10)
    bits.set(2)
    assert len(bits) == 10
    assert 2 in bits
    assert 3 not in bits
    assert 50 not in bits


@pytest.mark.parametrize("index", [-1, 10, 11])
def test_out_of_range(index):
    bits = BitArray(10)
    with pytest.raises(IndexError):
        bits.set(index)
    with pytest.raises(IndexError):
        bits.test(index)


def test_negative_size_rejected():
    with pytest.raises(ValueError):
        BitArray(-1)