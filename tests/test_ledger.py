import threading
import time

import pytest

from wallet import AddressLedger, CounterResetRefused, StoreUnavailable
from wallet.derivation import derive_stealth_keypair

ZERO_SEED = bytes(32)
ZERO_SEED_ADDRESSES = [
    "4SRYSzvcu17jREe2yeNmYMeHSJwgdbKbZSxjb7WBZm9g",
    "6wPVSWrRJdGvJ6kSBbPptRMap51nTQAZGda87av4YG1C",
    "APtAFTMfXk1W5iYHT8DCkrjrUyDmMPNXdUp2L8XV4VpG",
]


@pytest.fixture
def ledger(secret_store):
    return AddressLedger(secret_store, secret_store.get_or_create_seed())


@pytest.fixture
def zero_ledger(secret_store):
    return AddressLedger(secret_store, ZERO_SEED)


def test_zero_seed_scenario(zero_ledger):
    issued = [zero_ledger.generate() for _ in range(3)]
    assert [a.index for a in issued] == [0, 1, 2]
    assert [a.address for a in issued] == ZERO_SEED_ADDRESSES

    listed = zero_ledger.list_all()
    assert [a.index for a in listed] == [0, 1, 2]
    assert [a.address for a in listed] == ZERO_SEED_ADDRESSES


def test_generate_record(ledger, secret_store):
    addr = ledger.generate("Coffee")
    assert addr.index == 0
    assert addr.label == "Coffee"
    assert addr.created_at > 0
    assert secret_store.get_index() == 1
    assert ledger.next_index == 1


def test_monotonic_issuance(ledger):
    issued = [ledger.generate() for _ in range(10)]
    listed = ledger.list_all()
    assert len(listed) == 10
    assert [a.index for a in listed] == list(range(10))
    assert [a.address for a in listed] == [a.address for a in issued]
    # Re-derived entries carry no creation time or label
    assert all(a.created_at == 0 and a.label is None for a in listed)


def test_list_all_empty(ledger):
    assert ledger.list_all() == []


def test_counter_survives_new_ledger(secret_store, ledger):
    ledger.generate()
    ledger.generate()
    again = AddressLedger(secret_store, secret_store.get_or_create_seed())
    assert again.generate().index == 2


def test_recover_round_trip(ledger):
    addr = ledger.generate()
    keypair = ledger.recover_keypair(addr.address, addr.index)
    assert keypair is not None
    assert keypair.address == addr.address
    assert ledger.recover_keypair(addr.address, addr.index + 1) is None


def test_recover_not_found_cases(zero_ledger):
    assert zero_ledger.recover_keypair(ZERO_SEED_ADDRESSES[1], 0) is None
    assert zero_ledger.recover_keypair(ZERO_SEED_ADDRESSES[0], -1) is None
    assert zero_ledger.recover_keypair("not an address", 0) is None
    # Recovery works for any index, issued or not
    assert zero_ledger.recover_keypair(ZERO_SEED_ADDRESSES[2], 2).address == ZERO_SEED_ADDRESSES[2]


def test_concurrent_generate(ledger):
    results = []
    results_lock = threading.Lock()
    barrier = threading.Barrier(8)

    def worker():
        barrier.wait()
        for _ in range(5):
            addr = ledger.generate()
            with results_lock:
                results.append(addr)

    threads = [threading.Thread(target=worker) for _ in range(8)]
    for t in threads:
        t.start()
    for t in threads:
        t.join()

    assert sorted(a.index for a in results) == list(range(40))
    assert len({a.address for a in results}) == 40
    assert len(ledger.list_all()) == 40


def test_ledgers_sharing_a_store_never_repeat_an_index(secret_store, monkeypatch):
    seed = secret_store.get_or_create_seed()
    ledgers = [AddressLedger(secret_store, seed), AddressLedger(secret_store, seed)]
    original_get_index = secret_store.get_index

    def slow_get_index():
        index = original_get_index()
        time.sleep(0.05)
        return index

    monkeypatch.setattr(secret_store, "get_index", slow_get_index)

    results = []
    results_lock = threading.Lock()
    barrier = threading.Barrier(len(ledgers))

    def worker(ledger):
        barrier.wait()
        addr = ledger.generate()
        with results_lock:
            results.append(addr)

    threads = [threading.Thread(target=worker, args=(each,)) for each in ledgers]
    for t in threads:
        t.start()
    for t in threads:
        t.join()

    assert sorted(a.index for a in results) == [0, 1]
    assert len({a.address for a in results}) == 2
    assert original_get_index() == 2


def test_failed_persist_issues_nothing(ledger, secret_store, monkeypatch):
    ledger.generate()

    def fail(index):
        raise StoreUnavailable("disk full")

    monkeypatch.setattr(secret_store, "set_index", fail)
    with pytest.raises(StoreUnavailable):
        ledger.generate()
    monkeypatch.undo()

    assert ledger.generate().index == 1


def test_reset_counter_requires_acknowledgement(ledger, secret_store):
    seed = secret_store.get_or_create_seed()
    first = ledger.generate()
    ledger.generate()

    with pytest.raises(CounterResetRefused):
        ledger.reset_counter()
    assert ledger.next_index == 2

    ledger.reset_counter(acknowledge_reuse=True)
    assert ledger.next_index == 0
    assert secret_store.get_or_create_seed() == seed
    assert ledger.generate().address == first.address


def test_find_index(zero_ledger):
    for _ in range(3):
        zero_ledger.generate()
    assert zero_ledger.find_index(ZERO_SEED_ADDRESSES[2]) == 2
    assert zero_ledger.find_index(ZERO_SEED_ADDRESSES[2], limit=2) is None
    assert zero_ledger.find_index("11111111111111111111111111111111") is None
    assert zero_ledger.find_index("garbage!") is None


def test_find_index_beyond_counter(zero_ledger):
    assert zero_ledger.find_index(ZERO_SEED_ADDRESSES[1]) is None
    assert zero_ledger.find_index(ZERO_SEED_ADDRESSES[1], limit=10) == 1


def test_recover_watermark_after_counter_loss(ledger, secret_store):
    seed = secret_store.get_or_create_seed()
    for _ in range(6):
        ledger.generate()
    used = {derive_stealth_keypair(seed, i).address for i in (0, 3, 5)}

    ledger.reset_counter(acknowledge_reuse=True)
    assert ledger.recover_watermark(lambda a: a in used, gap_limit=5) == 6
    assert ledger.generate().index == 6


def test_recover_watermark_gap_limit(ledger, secret_store):
    seed = secret_store.get_or_create_seed()
    used = {derive_stealth_keypair(seed, i).address for i in (0, 10)}
    # Index 10 sits past a gap of 9 unused addresses
    assert ledger.recover_watermark(lambda a: a in used, gap_limit=5) == 1
    assert ledger.recover_watermark(lambda a: a in used, gap_limit=20) == 11


def test_recover_watermark_never_lowers(ledger):
    for _ in range(4):
        ledger.generate()
    assert ledger.recover_watermark(lambda a: False) == 4
    assert ledger.next_index == 4


def test_recover_watermark_invalid_gap(ledger):
    with pytest.raises(ValueError):
        ledger.recover_watermark(lambda a: False, gap_limit=0)


def test_bad_seed_rejected(secret_store):
    with pytest.raises(ValueError):
        AddressLedger(secret_store, b"short")
