from expenses import CustomExpense, EqualExpense
from participants import Participant


def people(*ids):
    return [Participant(participant_id=pid, name=pid) for pid in ids]


def equal(expense_id, amount, payer_id, beneficiaries):
    return EqualExpense(
        expense_id=expense_id,
        amount=amount,
        payer_id=payer_id,
        beneficiaries=beneficiaries
    )


def custom(expense_id, amount, payer_id, beneficiaries, shares):
    return CustomExpense(
        expense_id=expense_id,
        amount=amount,
        payer_id=payer_id,
        beneficiaries=beneficiaries,
        shares=shares
    )
