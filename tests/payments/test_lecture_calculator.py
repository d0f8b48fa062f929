from decimal import Decimal

from src.lecture_settlement.lecture_settlement.payments.calculator.standard_calculator import StandardPayrollCalculator
from src.lecture_settlement.lecture_settlement.roster.model import ClassConfig, TeacherAssignment


def _asg(rate: str) -> TeacherAssignment:
    return TeacherAssignment(teacher_id="t1", class_id="c1", rate=Decimal(rate))


def test_rate_is_spread_over_batch():
    calc = StandardPayrollCalculator()
    cls = ClassConfig(class_id="c1", name="Physics", batch_size=28)

    assert calc.rate_per_lecture(_asg("28000"), cls) == Decimal("1000")
    assert calc.amount_for(5, _asg("28000"), cls) == Decimal("5000")


def test_amount_rounds_half_up_to_whole_units():
    calc = StandardPayrollCalculator()
    cls = ClassConfig(class_id="c1", name="Maths", batch_size=8)

    # 1001 * 3 / 8 = 375.375
    assert calc.amount_for(3, _asg("1001"), cls) == Decimal("375")
    # 1 lecture of a 12 rate over 8 = 1.5
    assert calc.amount_for(1, _asg("12"), cls) == Decimal("2")


def test_zero_batch_size_means_zero_rate():
    calc = StandardPayrollCalculator()
    cls = ClassConfig(class_id="c1", name="Club", batch_size=0)

    assert calc.rate_per_lecture(_asg("5000"), cls) == Decimal("0")
    assert calc.amount_for(4, _asg("5000"), cls) == Decimal("0")
    assert calc.default_lecture_count(4, cls) == 4


def test_default_count_is_one_cycle_at_most():
    calc = StandardPayrollCalculator()
    cls = ClassConfig(class_id="c1", name="Physics", batch_size=10)

    assert calc.default_lecture_count(25, cls) == 10
    assert calc.default_lecture_count(3, cls) == 3
