"""Store 时间戳工具"""

from datetime import UTC, datetime, timedelta

from ulid import ULID


def utcnow() -> datetime:
    return datetime.now(UTC)


def touch(previous: datetime) -> datetime:
    """生成新的 updated_at，保证严格晚于 previous"""
    now = utcnow()
    if now <= previous:
        now = previous + timedelta(microseconds=1)
    return now


def new_task_id() -> str:
    return str(ULID())


def to_db_timestamp(value: datetime) -> str:
    # 固定微秒精度，保证字符串排序与时间顺序一致
    return value.isoformat(timespec="microseconds")
