"""
TAT 汇总测试
"""
import random
from datetime import datetime, time, timedelta
from types import MappingProxyType

import pytest

from order_tat.domain.constants import OrderStatus as S
from order_tat.domain.constants import StatusFamily, TatMode, TeamName
from order_tat.domain.exceptions import UnknownTeamError
from order_tat.domain.models import ActivityBlock, Order, StatusTransition, TeamConfig
from order_tat.domain.services.business_calendar import BusinessCalendarCalculator
from order_tat.domain.services.tat import TatAggregator

MONDAY_10 = datetime(2023, 1, 2, 10, 0)


def build_team_configs():
    audit_statuses = S.of_family(StatusFamily.AUDIT_REVIEW) - {S.AUDIT_REVIEW_LEVEL2_APPROVED}
    credit_statuses = S.of_family(StatusFamily.CREDIT_APPROVAL) - {S.AUDIT_REVIEW_CREDIT_APPROVAL_LEVEL2_APPROVED}

    audit_config = TeamConfig(
        team_name=TeamName.audit_review,
        activity_blocks=(
            ActivityBlock(audit_statuses, S.AUDIT_REVIEW_LEVEL1_OPEN, S.AUDIT_REVIEW_LEVEL1_IN_PROGRESS),
            ActivityBlock(
                credit_statuses,
                S.AUDIT_REVIEW_CREDIT_APPROVAL_LEVEL1_OPEN,
                S.AUDIT_REVIEW_CREDIT_APPROVAL_LEVEL1_IN_PROGRESS,
            ),
        ),
        start_time=time(9, 0),
        cutoff_time=time(17, 0),
    )
    trading_config = TeamConfig(
        team_name=TeamName.trading,
        activity_blocks=(
            ActivityBlock(S.of_family(StatusFamily.TRADING), S.TRADING_OPEN, S.TRADING_IN_PROGRESS),
        ),
        start_time=time(9, 0),
        cutoff_time=time(17, 0),
    )
    return MappingProxyType({
        TeamName.audit_review: audit_config,
        TeamName.trading: trading_config,
    })


def make_order(*steps) -> Order:
    return Order(
        order_id="ORD-1",
        status_transitions=[StatusTransition(status, when) for status, when in steps],
    )


@pytest.fixture
def aggregator():
    return TatAggregator(BusinessCalendarCalculator(), build_team_configs())


@pytest.fixture
def business_hours_aggregator():
    return TatAggregator(BusinessCalendarCalculator(), build_team_configs(), mode=TatMode.BUSINESS_HOURS)


# ==================== 里程碑 TAT ====================

def test_overall_tat(aggregator):
    order = make_order(
        (S.DRAFT, MONDAY_10),
        (S.SUBMITTED, MONDAY_10 + timedelta(minutes=10)),
        (S.COMPLETED, MONDAY_10 + timedelta(minutes=60)),
    )
    assert aggregator.overall_tat(order) == timedelta(minutes=60)


def test_review_and_execution_tat(aggregator):
    order = make_order(
        (S.DRAFT, MONDAY_10),
        (S.SUBMITTED, MONDAY_10 + timedelta(minutes=5)),
        (S.STARTED, MONDAY_10 + timedelta(minutes=25)),
        (S.COMPLETED, MONDAY_10 + timedelta(hours=2)),
    )
    assert aggregator.review_tat(order) == timedelta(minutes=20)
    assert aggregator.execution_tat(order) == timedelta(minutes=95)


def test_milestone_uses_first_start_and_last_end(aggregator):
    """测试起点取首次出现、终点取最后一次出现"""
    order = make_order(
        (S.DRAFT, MONDAY_10),
        (S.COMPLETED, MONDAY_10 + timedelta(minutes=30)),
        (S.DRAFT, MONDAY_10 + timedelta(minutes=40)),
        (S.COMPLETED, MONDAY_10 + timedelta(minutes=90)),
    )
    assert aggregator.overall_tat(order) == timedelta(minutes=90)


def test_milestone_missing_marker_is_zero(aggregator):
    order = make_order((S.DRAFT, MONDAY_10), (S.SUBMITTED, MONDAY_10 + timedelta(minutes=10)))
    assert aggregator.overall_tat(order) == timedelta(0)
    assert aggregator.execution_tat(order) == timedelta(0)


def test_milestone_end_before_start_is_zero(aggregator):
    order = make_order((S.COMPLETED, MONDAY_10), (S.DRAFT, MONDAY_10 + timedelta(minutes=10)))
    assert aggregator.overall_tat(order) == timedelta(0)


def test_empty_history_is_zero(aggregator):
    """测试空历史：全部为 0"""
    for order in (Order(order_id="A"), Order(order_id="B", status_transitions=None), None):
        assert aggregator.overall_tat(order) == timedelta(0)
        assert aggregator.review_tat(order) == timedelta(0)
        assert aggregator.team_tat(order, TeamName.trading) == timedelta(0)


# ==================== 团队 TAT ====================

def test_team_tat_standard(aggregator):
    """草稿 10:00、进入 10:10、处理 10:20、离开 10:50 -> 40m"""
    order = make_order(
        (S.DRAFT, MONDAY_10),
        (S.AUDIT_REVIEW_LEVEL1_OPEN, MONDAY_10 + timedelta(minutes=10)),
        (S.AUDIT_REVIEW_LEVEL1_IN_PROGRESS, MONDAY_10 + timedelta(minutes=20)),
        (S.STARTED, MONDAY_10 + timedelta(minutes=50)),
    )
    assert aggregator.audit_review_team_tat(order) == timedelta(minutes=40)


def test_team_tat_parked_excluded(aggregator):
    """毛时长 80m，挂起 60m -> 净 20m"""
    order = make_order(
        (S.AUDIT_REVIEW_LEVEL1_OPEN, MONDAY_10),
        (S.AUDIT_REVIEW_LEVEL1_PARKED, MONDAY_10 + timedelta(minutes=10)),
        (S.AUDIT_REVIEW_LEVEL1_IN_PROGRESS, MONDAY_10 + timedelta(minutes=70)),
        (S.COMPLETED, MONDAY_10 + timedelta(minutes=80)),
    )
    assert aggregator.audit_review_team_tat(order) == timedelta(minutes=20)


def test_team_tat_after_cutoff(aggregator):
    """周五 17:30 进入，周一 09:30 离开 -> 有效起点周一 09:00，30m"""
    order = make_order(
        (S.AUDIT_REVIEW_LEVEL1_OPEN, datetime(2023, 1, 6, 17, 30)),
        (S.COMPLETED, datetime(2023, 1, 9, 9, 30)),
    )
    assert aggregator.audit_review_team_tat(order) == timedelta(minutes=30)


def test_team_tat_over_weekend_is_wall_clock(aggregator):
    """周五 16:00 进入（截止前），周一 10:00 离开 -> 自然时间 66h"""
    order = make_order(
        (S.AUDIT_REVIEW_LEVEL1_OPEN, datetime(2023, 1, 6, 16, 0)),
        (S.COMPLETED, datetime(2023, 1, 9, 10, 0)),
    )
    assert aggregator.audit_review_team_tat(order) == timedelta(hours=66)


def test_team_tat_after_cutoff_work_already_started(aggregator):
    """截止后进入但当晚已开始处理：以处理时间为有效起点"""
    order = make_order(
        (S.TRADING_OPEN, datetime(2023, 1, 6, 17, 30)),
        (S.TRADING_IN_PROGRESS, datetime(2023, 1, 6, 18, 0)),
        (S.COMPLETED, datetime(2023, 1, 6, 19, 0)),
    )
    assert aggregator.trading_team_tat(order) == timedelta(minutes=60)


def test_team_tat_after_cutoff_work_started_next_business_day(aggregator):
    order = make_order(
        (S.TRADING_OPEN, datetime(2023, 1, 6, 17, 30)),
        (S.TRADING_IN_PROGRESS, datetime(2023, 1, 9, 9, 15)),
        (S.COMPLETED, datetime(2023, 1, 9, 9, 45)),
    )
    assert aggregator.trading_team_tat(order) == timedelta(minutes=45)


def test_team_tat_exit_before_effective_start_is_zero(aggregator):
    order = make_order(
        (S.TRADING_OPEN, datetime(2023, 1, 6, 17, 30)),
        (S.COMPLETED, datetime(2023, 1, 7, 10, 0)),
    )
    assert aggregator.trading_team_tat(order) == timedelta(0)


def test_parked_interval_clipped_to_effective_start(aggregator):
    """挂起区间只计有效起点之后的部分"""
    order = make_order(
        (S.TRADING_OPEN, datetime(2023, 1, 6, 17, 30)),
        (S.TRADING_PARKED, datetime(2023, 1, 6, 17, 40)),
        (S.TRADING_IN_PROGRESS, datetime(2023, 1, 9, 9, 20)),
        (S.COMPLETED, datetime(2023, 1, 9, 9, 50)),
    )
    # 有效起点周一 09:00，毛时长 50m，挂起 09:00-09:20
    assert aggregator.trading_team_tat(order) == timedelta(minutes=30)


def test_fully_parked_block_is_zero(aggregator):
    order = make_order(
        (S.TRADING_OPEN, MONDAY_10),
        (S.TRADING_PARKED, MONDAY_10),
        (S.COMPLETED, MONDAY_10 + timedelta(hours=1)),
    )
    assert aggregator.trading_team_tat(order) == timedelta(0)


def test_team_tat_user_example(aggregator):
    """完整审核流程：挂起 60m 被扣除，合计 60m"""
    t0 = datetime(2023, 1, 2, 9, 0)
    order = make_order(
        (S.DRAFT, t0),
        (S.SUBMITTED, t0 + timedelta(minutes=10)),
        (S.STARTED, t0 + timedelta(minutes=20)),
        (S.AUDIT_REVIEW_LEVEL1_OPEN, t0 + timedelta(minutes=30)),
        (S.AUDIT_REVIEW_LEVEL1_IN_PROGRESS, t0 + timedelta(minutes=40)),
        (S.AUDIT_REVIEW_LEVEL1_PARKED, t0 + timedelta(minutes=50)),
        (S.AUDIT_REVIEW_LEVEL1_IN_PROGRESS, t0 + timedelta(minutes=110)),
        (S.AUDIT_REVIEW_LEVEL1_SUBMITTED, t0 + timedelta(minutes=120)),
        (S.AUDIT_REVIEW_LEVEL2_OPEN, t0 + timedelta(minutes=130)),
        (S.AUDIT_REVIEW_LEVEL2_IN_PROGRESS, t0 + timedelta(minutes=140)),
        (S.AUDIT_REVIEW_LEVEL2_APPROVED, t0 + timedelta(minutes=150)),
    )
    assert aggregator.audit_review_team_tat(order) == timedelta(minutes=60)


def test_team_tat_multi_block(aggregator):
    """审核区块 30m + 信贷审批区块 30m（扣除挂起 30m）"""
    t0 = datetime(2023, 1, 2, 9, 0)
    order = make_order(
        (S.DRAFT, t0),
        (S.AUDIT_REVIEW_LEVEL1_OPEN, t0 + timedelta(minutes=10)),
        (S.AUDIT_REVIEW_LEVEL2_APPROVED, t0 + timedelta(minutes=40)),
        (S.TRADING_OPEN, t0 + timedelta(minutes=40)),
        (S.TRADING_IN_PROGRESS, t0 + timedelta(minutes=50)),
        (S.AUDIT_REVIEW_CREDIT_APPROVAL_LEVEL1_OPEN, t0 + timedelta(minutes=60)),
        (S.AUDIT_REVIEW_CREDIT_APPROVAL_LEVEL1_PARKED, t0 + timedelta(minutes=70)),
        (S.AUDIT_REVIEW_CREDIT_APPROVAL_LEVEL1_IN_PROGRESS, t0 + timedelta(minutes=100)),
        (S.AUDIT_REVIEW_CREDIT_APPROVAL_LEVEL2_APPROVED, t0 + timedelta(minutes=120)),
    )
    assert aggregator.audit_review_team_tat(order) == timedelta(minutes=60)
    # 交易区块 09:40 进入，10:00 离开
    assert aggregator.trading_team_tat(order) == timedelta(minutes=20)


def test_block_without_exit_is_zero(aggregator):
    """区块尚未结束（在途订单）计 0"""
    order = make_order(
        (S.TRADING_OPEN, MONDAY_10),
        (S.TRADING_IN_PROGRESS, MONDAY_10 + timedelta(minutes=10)),
    )
    assert aggregator.trading_team_tat(order) == timedelta(0)


def test_block_without_entry_is_zero(aggregator):
    order = make_order(
        (S.TRADING_IN_PROGRESS, MONDAY_10),
        (S.COMPLETED, MONDAY_10 + timedelta(minutes=10)),
    )
    assert aggregator.trading_team_tat(order) == timedelta(0)


def test_unknown_team_raises(aggregator):
    """测试未知团队：调用方错误，不回落为 0"""
    with pytest.raises(UnknownTeamError) as exc_info:
        aggregator.team_tat(Order(order_id="X"), "SETTLEMENT")
    assert exc_info.value.team_name == "SETTLEMENT"
    assert isinstance(exc_info.value, LookupError)


# ==================== 排序与幂等 ====================

def test_unsorted_history_does_not_mutate_order(aggregator):
    """测试乱序输入：结果与有序一致，且不修改调用方列表"""
    order = make_order(
        (S.AUDIT_REVIEW_LEVEL1_OPEN, MONDAY_10),
        (S.AUDIT_REVIEW_LEVEL1_PARKED, MONDAY_10 + timedelta(minutes=10)),
        (S.AUDIT_REVIEW_LEVEL1_IN_PROGRESS, MONDAY_10 + timedelta(minutes=70)),
        (S.COMPLETED, MONDAY_10 + timedelta(minutes=80)),
    )
    random.Random(7).shuffle(order.status_transitions)
    snapshot = list(order.status_transitions)

    first = aggregator.audit_review_team_tat(order)
    second = aggregator.audit_review_team_tat(order)

    assert first == second == timedelta(minutes=20)
    assert order.status_transitions == snapshot


def test_transitions_without_timestamp_are_ignored(aggregator):
    order = make_order(
        (S.DRAFT, MONDAY_10),
        (S.SUBMITTED, None),
        (S.COMPLETED, MONDAY_10 + timedelta(minutes=15)),
    )
    assert aggregator.overall_tat(order) == timedelta(minutes=15)


def test_same_timestamp_keeps_insertion_order(aggregator):
    """相同时间戳保持原有相对顺序（稳定排序）"""
    order = make_order(
        (S.TRADING_OPEN, MONDAY_10),
        (S.COMPLETED, MONDAY_10),
        (S.TRADING_IN_PROGRESS, MONDAY_10 + timedelta(minutes=5)),
        (S.TRADING_SUBMITTED, MONDAY_10 + timedelta(minutes=30)),
    )
    # TRADING_OPEN 之后紧跟 COMPLETED，区块立即结束
    assert aggregator.trading_team_tat(order) == timedelta(0)


# ==================== 汇总 ====================

def test_team_tats_and_report(aggregator):
    order = make_order(
        (S.DRAFT, MONDAY_10),
        (S.SUBMITTED, MONDAY_10 + timedelta(minutes=10)),
        (S.STARTED, MONDAY_10 + timedelta(minutes=20)),
        (S.TRADING_OPEN, MONDAY_10 + timedelta(minutes=30)),
        (S.TRADING_IN_PROGRESS, MONDAY_10 + timedelta(minutes=35)),
        (S.COMPLETED, MONDAY_10 + timedelta(minutes=90)),
    )

    tats = aggregator.team_tats(order)
    assert list(tats) == TeamName.all()
    assert tats == {
        TeamName.audit_review: timedelta(0),
        TeamName.trading: timedelta(hours=1),
    }

    report = aggregator.build_report(order)
    assert report.order_id == "ORD-1"
    assert report.overall == timedelta(minutes=90)
    assert report.review == timedelta(minutes=10)
    assert report.execution == timedelta(minutes=70)

    data = report.to_dict()
    assert data["overall"] == {"seconds": 5400, "text": "1h 30m"}
    assert data["teams"][TeamName.trading]["text"] == "1h 00m"


# ==================== 营业时间口径 ====================

def test_business_hours_mode_skips_weekend(business_hours_aggregator):
    order = make_order(
        (S.AUDIT_REVIEW_LEVEL1_OPEN, datetime(2023, 1, 6, 16, 0)),
        (S.COMPLETED, datetime(2023, 1, 9, 10, 0)),
    )
    assert business_hours_aggregator.audit_review_team_tat(order) == timedelta(hours=2)


def test_business_hours_mode_parked_overnight(business_hours_aggregator):
    """营业时间口径：挂起区间同样按营业时间扣除"""
    order = make_order(
        (S.TRADING_OPEN, datetime(2023, 1, 2, 16, 0)),
        (S.TRADING_PARKED, datetime(2023, 1, 2, 16, 30)),
        (S.TRADING_IN_PROGRESS, datetime(2023, 1, 3, 9, 30)),
        (S.COMPLETED, datetime(2023, 1, 3, 10, 0)),
    )
    # 毛时长 1h + 1h，挂起 30m + 30m
    assert business_hours_aggregator.trading_team_tat(order) == timedelta(hours=1)
