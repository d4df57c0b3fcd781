import pytest

from zerocash import Address, DeterministicRandom


@pytest.fixture
def det_rng():
    return DeterministicRandom(b"zerocash-test-seed")


@pytest.fixture
def address(det_rng):
    return Address.generate(rng=det_rng)


@pytest.fixture
def other_address():
    return Address.generate(rng=DeterministicRandom(b"zerocash-other-seed"))
