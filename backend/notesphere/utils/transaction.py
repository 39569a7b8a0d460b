"""
事务边界工具。

一次关系变更 (点赞、收藏、关注、评论) 及其引起的计数器更新必须在同一个事务内提交，
任何异常都回滚整个事务，不会出现"行已变更而计数未变"或相反的中间状态。
"""
from contextlib import contextmanager

from sqlalchemy import delete, update
from sqlalchemy.exc import IntegrityError

from notesphere import db


@contextmanager
def transaction():
    """在 db.session 上开启一个工作单元：正常结束时提交，异常时回滚后继续抛出"""
    try:
        yield db.session
        db.session.commit()
    except BaseException:
        db.session.rollback()
        raise


def insert_or_conflict(instance):
    """
    在保存点 (SAVEPOINT) 内插入一行。

    返回 True 表示插入成功；返回 False 表示触发了唯一约束 (并发请求已插入同一行)，
    此时只回滚保存点，外层事务仍然可用。
    """
    try:
        with db.session.begin_nested():
            db.session.add(instance)
            db.session.flush()
        return True
    except IntegrityError:
        return False


def delete_if_present(instance):
    """
    按主键删除一行并返回是否真的删除了。

    两个请求同时删除同一行时只有一个能拿到 True，调用方据此决定是否回退计数。
    """
    model = type(instance)
    result = db.session.execute(
        delete(model)
        .where(model.id == instance.id)
        .execution_options(synchronize_session=False)
    )
    db.session.expunge(instance)
    return result.rowcount == 1


def compare_and_set(model, row_id, column_name, expected, new_value):
    """仅当当前值等于 expected 时才写入 new_value，返回是否写入成功"""
    column = getattr(model, column_name)
    result = db.session.execute(
        update(model)
        .where(model.id == row_id, column == expected)
        .values({column_name: new_value})
        .execution_options(synchronize_session=False)
    )
    return result.rowcount == 1


def delete_if_matches(model, row_id, column_name, expected):
    """仅当当前值等于 expected 时才删除该行，返回是否删除成功"""
    column = getattr(model, column_name)
    result = db.session.execute(
        delete(model)
        .where(model.id == row_id, column == expected)
        .execution_options(synchronize_session=False)
    )
    return result.rowcount == 1
