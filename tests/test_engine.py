"""Tests for the FinancialEngine façade."""

from datetime import datetime, timezone

from freelance_finance.engine import FinancialEngine, create_financial_engine, get_month_range
from freelance_finance.models import (
    Currency,
    DateRange,
    EngineConfig,
    EventStatus,
    Expense,
    HealthStatus,
    Payment,
    Project,
    TimelineEventType,
)


class TestEngineBasics:
    """Tests for construction and simple delegation."""

    def test_now_is_injected(self, projects, expenses, config, now):
        """Test that the engine keeps the instant it was given."""
        engine = create_financial_engine(projects, expenses, config, now)
        assert engine.now == now
        assert engine.get_config() is config

    def test_now_defaults_to_clock(self, config):
        """Test that now is read once when omitted."""
        engine = FinancialEngine([], [], config)
        assert isinstance(engine.now, datetime)

    def test_aware_now_is_made_local(self, config):
        """Test that a timezone-aware now behaves like record dates."""
        aware_now = datetime(2024, 3, 15, 12, 0, tzinfo=timezone.utc)
        project = Project(id="p", payments=[
            Payment(id="a", amount=100, date="2024-03-01T10:00:00Z", status="SCHEDULED"),
        ])
        engine = FinancialEngine([project], [], config, aware_now)
        assert engine.now.tzinfo is None
        assert engine.now == aware_now.astimezone().replace(tzinfo=None)
        health = engine.get_health_score()
        assert health.factors.overdue_penalty == 5
        assert engine.get_calendar_events(aware_now)[0].status == EventStatus.OVERDUE

    def test_dashboard_defaults(self, projects, config, now):
        """Test that reminder window and feed size come from the constructor."""
        expenses = [Expense(id="x", amount=10, is_recurring=True, due_day=20)]
        engine = FinancialEngine(
            projects, expenses, config, now,
            reminder_days_ahead=3, activity_limit=1,
        )
        assert engine.get_expense_reminders() == []
        assert [r.expense_id for r in engine.get_expense_reminders(7)] == ["x"]
        groups = engine.get_recent_activity()
        assert [item.id for group in groups for item in group.items] == ["pay2"]

    def test_does_not_mutate_inputs(self, projects, expenses, config, now):
        """Test that computing every view leaves the records untouched."""
        before = [p.model_dump() for p in projects], [e.model_dump() for e in expenses]
        engine = FinancialEngine(projects, expenses, config, now)
        engine.get_health_score()
        engine.get_recent_activity()
        engine.get_calendar_events(now)
        engine.compare_periods(DateRange.THIS_MONTH)
        after = [p.model_dump() for p in projects], [e.model_dump() for e in expenses]
        assert before == after

    def test_convert_to_main_currency(self, config, now):
        """Test conversion through the bound converter."""
        engine = FinancialEngine([], [], config, now)
        assert engine.convert_to_main_currency(10, Currency.USD) == 50.0

    def test_project_financials_lookup(self, projects, expenses, config, now):
        """Test financials for one project and for an unknown id."""
        engine = FinancialEngine(projects, expenses, config, now)
        financials = engine.get_project_financials("p1")
        assert financials.paid == 7500.0
        assert financials.remaining == 2500.0
        assert engine.get_project_financials("missing") is None

    def test_active_project_financials(self, projects, expenses, config, now):
        """Test that ACTIVE and ONGOING projects are both active."""
        engine = FinancialEngine(projects, expenses, config, now)
        assert len(engine.get_active_project_financials()) == 2
        assert len(engine.get_all_project_financials()) == 2

    def test_expense_views(self, projects, expenses, config, now):
        """Test progress, reminders and burn rate through the engine."""
        engine = FinancialEngine(projects, expenses, config, now)
        progress = engine.get_recurring_expense_progress()
        assert progress.total_count == 1
        assert progress.percent_paid == 100
        assert engine.get_expense_reminders() == []
        assert engine.get_recurring_expense_total() == 100.0

    def test_progress_for_other_month(self, projects, expenses, config, now):
        """Test progress for an explicit month."""
        engine = FinancialEngine(projects, expenses, config, now)
        progress = engine.get_recurring_expense_progress(datetime(2024, 2, 1))
        assert progress.paid_count == 0
        assert progress.pending_count == 1


class TestFinancialSnapshot:
    """Tests for get_financial_snapshot."""

    def test_this_month(self, projects, expenses, config, now):
        """Test headline figures for March."""
        engine = FinancialEngine(projects, expenses, config, now)
        snapshot = engine.get_snapshot_for_range(DateRange.THIS_MONTH)
        assert snapshot.income.total == 5000.0
        assert snapshot.income.paid == 5000.0
        assert snapshot.income.scheduled == 3000.0
        assert snapshot.income.overdue == 1000.0
        assert snapshot.expenses.total == 1000.0
        assert snapshot.expenses.pending == 300.0
        assert snapshot.net == 4000.0
        assert snapshot.profit_margin == 80.0
        assert snapshot.goal_progress == 50.0
        assert snapshot.recurring_income == 5000.0
        assert snapshot.recurring_expenses == 100.0

    def test_tax_reserve(self, projects, expenses, now):
        """Test the tax reserve share of income."""
        engine = FinancialEngine(projects, expenses, EngineConfig(tax_reserve_percent=10), now)
        assert engine.get_snapshot_for_range("THIS_MONTH").tax_reserve == 500.0

    def test_goal_progress_capped(self, now):
        """Test that goal progress never exceeds 100."""
        project = Project(id="p", payments=[Payment(id="a", amount=50000, date=datetime(2024, 3, 1))])
        engine = FinancialEngine([project], [], EngineConfig(), now)
        assert engine.get_snapshot_for_range(DateRange.THIS_MONTH).goal_progress == 100.0

    def test_zero_goal_does_not_divide_by_zero(self, now):
        """Test that a zero goal is treated as 1."""
        project = Project(id="p", payments=[Payment(id="a", amount=0.5, date=datetime(2024, 3, 1))])
        engine = FinancialEngine([project], [], EngineConfig(monthly_goal=0), now)
        assert engine.get_snapshot_for_range(DateRange.THIS_MONTH).goal_progress == 50.0

    def test_last_second_of_month(self, config, now):
        """Test that a payment at 23:59:59 on the last day counts in that month only."""
        project = Project(id="p", payments=[
            Payment(id="late", amount=700, date=datetime(2024, 3, 31, 23, 59, 59)),
        ])
        engine = FinancialEngine([project], [], config, now)
        march = get_month_range(datetime(2024, 3, 1))
        april = get_month_range(datetime(2024, 4, 1))
        assert engine.get_financial_snapshot(march.start, march.end).income.total == 700.0
        assert engine.get_financial_snapshot(april.start, april.end).income.total == 0.0
        assert [e.id for e in engine.get_calendar_events(datetime(2024, 3, 1))] == ["pay-late"]
        assert engine.get_calendar_events(datetime(2024, 4, 1)) == []

    def test_no_income_margin_is_zero(self, expenses, config, now):
        """Test that margin is 0 without income."""
        engine = FinancialEngine([], expenses, config, now)
        snapshot = engine.get_snapshot_for_range(DateRange.THIS_MONTH)
        assert snapshot.profit_margin == 0.0
        assert snapshot.net == -1000.0


class TestHealthScore:
    """Tests for get_health_score."""

    def test_warning(self, projects, expenses, config, now):
        """Test 50% goal, 80% margin, one overdue receivable."""
        engine = FinancialEngine(projects, expenses, config, now)
        health = engine.get_health_score()
        assert health.factors.goal_progress == 50.0
        assert health.factors.profit_margin == 80.0
        assert health.factors.overdue_penalty == 5
        assert health.score == 48
        assert health.status == HealthStatus.WARNING

    def test_excellent(self, config, now):
        """Test goal met with full margin."""
        project = Project(id="p", payments=[Payment(id="a", amount=20000, date=datetime(2024, 3, 1))])
        health = FinancialEngine([project], [], config, now).get_health_score()
        assert health.score == 85
        assert health.status == HealthStatus.EXCELLENT

    def test_status_boundaries(self, config, now):
        """Test that 70 is EXCELLENT, 69 WARNING, 40 WARNING and 39 CRITICAL."""
        def health_for(income, spent):
            project = Project(id="p", payments=[
                Payment(id="a", amount=income, date=datetime(2024, 3, 1)),
            ])
            expenses = [Expense(id="x", amount=spent, status="PAID", date=datetime(2024, 3, 5))]
            return FinancialEngine([project], expenses, config, now).get_health_score()

        # goal% / 2 + margin * 0.35 with a 10000 goal
        cases = [
            (7000, 0, 70, HealthStatus.EXCELLENT),
            (6800, 0, 69, HealthStatus.WARNING),
            (8000, 8000, 40, HealthStatus.WARNING),
            (7800, 7800, 39, HealthStatus.CRITICAL),
        ]
        for income, spent, score, status in cases:
            health = health_for(income, spent)
            assert health.score == score
            assert health.status == status

    def test_critical_and_clamped(self, config, now):
        """Test that penalties cannot push the score below 0."""
        project = Project(id="p", payments=[
            Payment(id=str(i), amount=10, date=datetime(2024, 1, i + 1), status="SCHEDULED")
            for i in range(5)
        ])
        health = FinancialEngine([project], [], config, now).get_health_score()
        assert health.factors.overdue_penalty == 15
        assert health.score == 0
        assert health.status == HealthStatus.CRITICAL


class TestRecentActivity:
    """Tests for get_recent_activity."""

    def test_grouping(self, projects, expenses, config, now):
        """Test Today / Last 7 Days / Earlier buckets, newest first."""
        groups = FinancialEngine(projects, expenses, config, now).get_recent_activity()
        assert [g.label for g in groups] == ["Today", "Last 7 Days", "Earlier"]
        assert [i.id for i in groups[0].items] == ["pay2"]
        assert [i.id for i in groups[1].items] == ["hosting-2024-03", "pay1"]
        assert [i.id for i in groups[2].items] == ["laptop", "pay5", "pay6"]

    def test_limit_applies_before_grouping(self, projects, expenses, config, now):
        """Test that truncation drops older groups entirely."""
        groups = FinancialEngine(projects, expenses, config, now).get_recent_activity(limit=3)
        assert [g.label for g in groups] == ["Today", "Last 7 Days"]

    def test_scheduled_payments_excluded(self, projects, expenses, config, now):
        """Test that only money that moved appears."""
        groups = FinancialEngine(projects, expenses, config, now).get_recent_activity()
        ids = {item.id for group in groups for item in group.items}
        assert "pay3" not in ids
        assert "course" not in ids

    def test_empty(self, config, now):
        """Test that no activity gives no groups."""
        assert FinancialEngine([], [], config, now).get_recent_activity() == []


class TestCalendarEvents:
    """Tests for get_calendar_events."""

    def test_march(self, projects, expenses, config, now):
        """Test every event and status for March."""
        events = FinancialEngine(projects, expenses, config, now).get_calendar_events(now)
        by_id = {event.id: event for event in events}
        assert set(by_id) == {
            "start-p1", "due-p1",
            "pay-pay1", "pay-pay2", "pay-pay3", "pay-pay4",
            "rec-hosting", "exp-laptop", "exp-course",
        }
        assert by_id["start-p1"].status == EventStatus.INFO
        assert by_id["start-p1"].type == TimelineEventType.PROJECT_START
        assert by_id["due-p1"].status == EventStatus.PENDING
        assert by_id["pay-pay3"].status == EventStatus.OVERDUE
        assert by_id["pay-pay1"].status == EventStatus.PAID
        assert by_id["rec-hosting"].date == datetime(2024, 3, 14)
        assert by_id["rec-hosting"].status == EventStatus.PAID
        assert events == sorted(events, key=lambda e: e.date)

    def test_trial_month(self, projects, expenses, config, now):
        """Test that the trial end and first charge appear in April."""
        events = FinancialEngine(projects, expenses, config, now).get_calendar_events(
            datetime(2024, 4, 1)
        )
        by_id = {event.id: event for event in events}
        assert set(by_id) == {"trial-tool", "rec-tool", "rec-hosting"}
        assert by_id["trial-tool"].type == TimelineEventType.TRIAL_END
        assert by_id["rec-tool"].date == datetime(2024, 4, 30)

    def test_past_unpaid_recurring_is_overdue(self, projects, expenses, config, now):
        """Test February hosting (unpaid) shows as overdue."""
        events = FinancialEngine(projects, expenses, config, now).get_calendar_events(
            datetime(2024, 2, 1)
        )
        by_id = {event.id: event for event in events}
        assert by_id["rec-hosting"].status == EventStatus.OVERDUE
        assert by_id["pay-pay5"].status == EventStatus.PAID

    def test_trial_ending_on_last_day_is_charged(self, config, now):
        """Test that a trial ending late on the month's last day still shows the charge."""
        expense = Expense(
            id="x",
            amount=10,
            is_recurring=True,
            due_day=5,
            is_trial=True,
            trial_end_date=datetime(2024, 3, 31, 23, 0),
        )
        events = FinancialEngine([], [expense], config, now).get_calendar_events(now)
        assert {event.id for event in events} == {"trial-x", "rec-x"}

    def test_recurring_day_falls_back(self, config, now):
        """Test day from the expense date, then day 15."""
        expenses = [
            Expense(id="a", amount=1, is_recurring=True, date=datetime(2023, 6, 3)),
            Expense(id="b", amount=1, is_recurring=True),
        ]
        events = FinancialEngine([], expenses, config, now).get_calendar_events(now)
        dates = {event.id: event.date for event in events}
        assert dates == {"rec-a": datetime(2024, 3, 3), "rec-b": datetime(2024, 3, 15)}


class TestReportsThroughEngine:
    """Tests for report delegation and period comparison."""

    def test_compare_this_month(self, projects, expenses, config, now):
        """Test trends against February."""
        comparison = FinancialEngine(projects, expenses, config, now).compare_periods(
            DateRange.THIS_MONTH
        )
        assert comparison.previous.income.total == 2500.0
        assert comparison.income_trend == 100.0
        assert comparison.expense_trend is None
        assert comparison.net_trend == 60.0

    def test_compare_all_time_has_no_previous(self, projects, expenses, config, now):
        """Test that ALL_TIME has nothing to compare with."""
        comparison = FinancialEngine(projects, expenses, config, now).compare_periods("ALL_TIME")
        assert comparison.previous is None
        assert comparison.income_trend is None
        assert comparison.current.income.total == 8500.0
