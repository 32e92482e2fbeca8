"""users / proposals / credit_transactions 에 대한 읽기-수정-쓰기 구간을 직렬화하는 락.

수락(accept) 이 내부에서 transfer 를 호출하는 것처럼 서비스끼리 중첩 호출하므로
재진입 가능한 RLock 을 쓴다. 모든 서비스가 같은 인스턴스를 공유해야 한다.
"""

from __future__ import annotations

import threading


_ledger_lock = threading.RLock()


def get_ledger_lock() -> threading.RLock:
    return _ledger_lock
