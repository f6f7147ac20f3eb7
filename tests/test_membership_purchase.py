import datetime

from common.enums import MembershipStatus, PaymentOrderStatus, UserType
from db_domains import utc_now
from db_domains.db_interface import DBInterface
from models.membership import MembershipCard, MembershipCardType
from models.payment import PaymentOrder
from models.subscription import CashLendingSubscriptionPlan
from models.user import User
from tests.conftest import create_card, create_card_type, auth_headers, VALID_SIGNATURE


def payment(order_id="order_1", payment_id="pay_1", signature=VALID_SIGNATURE):
    return {"razorpay_order_id": order_id, "razorpay_payment_id": payment_id, "razorpay_signature": signature}


def open_order(client, headers, order_type, item_id):
    response = client.post("/payments/create-order", headers=headers, json={"type": order_type, "item_id": item_id})
    assert response.status_code == 201
    return response.json()["data"]["order_id"]


def create_plan(database, name="Monthly", price=299.0, duration_days=30):
    return DBInterface(CashLendingSubscriptionPlan, database).create(
        {"name": name, "price": price, "duration_days": duration_days, "features": ["Instant cash"], "is_active": True}
    )


def active_cards(database, user):
    return DBInterface(MembershipCard, database).read_by_fields(
        [MembershipCard.user_id == user.id, MembershipCard.status == MembershipStatus.active]
    )


def test_create_order_for_card_type(client, database, razorpay, customer, customer_headers):
    card_type = create_card_type(database, price=999.5)

    response = client.post("/payments/create-order", headers=customer_headers,
                           json={"type": "membership_card", "item_id": card_type.id})

    assert response.status_code == 201
    assert response.json()["data"] == {"order_id": "order_1", "amount": 99950, "currency": "INR",
                                       "key_id": "rzp_test_key"}
    assert razorpay.orders[0]["notes"]["user_id"] == str(customer.id)
    order = DBInterface(PaymentOrder, database).read_single_by_fields([PaymentOrder.razorpay_order_id == "order_1"])
    assert (order.user_id, order.item_id, order.amount) == (customer.id, card_type.id, 99950)
    assert order.status == PaymentOrderStatus.created


def test_create_order_for_unknown_item(client, customer_headers):
    response = client.post("/payments/create-order", headers=customer_headers,
                           json={"type": "cash_lending_subscription", "item_id": 42})

    assert response.status_code == 404


def test_create_order_without_gateway(client, database, razorpay, customer_headers):
    razorpay.is_configured = False
    card_type = create_card_type(database)

    response = client.post("/payments/create-order", headers=customer_headers,
                           json={"type": "membership_card", "item_id": card_type.id})

    assert response.status_code == 500
    assert response.json()["message"] == "Payment gateway is not configured. Please contact support."


def test_purchase_membership(client, database, customer, customer_headers):
    card_type = create_card_type(database, validity_months=12)
    order_id = open_order(client, customer_headers, "membership_card", card_type.id)

    response = client.post("/memberships/purchase", headers=customer_headers,
                           json={**payment(order_id), "card_type_id": card_type.id})

    assert response.status_code == 201
    data = response.json()["data"]
    assert data["status"] == "active"
    assert data["payment_id"] == "pay_1"
    purchase = datetime.datetime.fromisoformat(data["purchase_date"])
    expiry = datetime.datetime.fromisoformat(data["expiry_date"])
    assert expiry.year == purchase.year + 1 and expiry.month == purchase.month

    me = client.get("/memberships/me", headers=customer_headers)
    assert me.json()["data"]["card_type"]["name"] == "Gold"
    order = DBInterface(PaymentOrder, database).read_single_by_fields([PaymentOrder.razorpay_order_id == order_id])
    assert order.status == PaymentOrderStatus.paid
    assert order.payment_id == "pay_1"


def test_purchase_with_bad_signature_creates_nothing(client, database, customer, customer_headers):
    card_type = create_card_type(database)
    order_id = open_order(client, customer_headers, "membership_card", card_type.id)

    response = client.post("/memberships/purchase", headers=customer_headers,
                           json={**payment(order_id, signature="forged"), "card_type_id": card_type.id})

    assert response.status_code == 400
    assert response.json()["message"] == "Invalid payment signature"
    assert DBInterface(MembershipCard, database).read_by_fields([MembershipCard.user_id == customer.id]) == []


def test_purchase_while_active_is_conflict(client, database, member, customer_headers):
    card_type = create_card_type(database, name="Silver")

    response = client.post("/memberships/purchase", headers=customer_headers,
                           json={**payment(), "card_type_id": card_type.id})

    assert response.status_code == 409


def test_purchase_after_expiry_marks_old_card_expired(client, database, customer, customer_headers):
    card_type = create_card_type(database)
    old_card = create_card(database, customer, card_type, expiry_date=utc_now() - datetime.timedelta(days=1))
    order_id = open_order(client, customer_headers, "membership_card", card_type.id)

    response = client.post("/memberships/purchase", headers=customer_headers,
                           json={**payment(order_id), "card_type_id": card_type.id})

    assert response.status_code == 201
    assert DBInterface(MembershipCard, database).read_by_id(old_card.id).status == MembershipStatus.expired


def test_purchase_requires_an_order_opened_by_create_order(client, database, customer, customer_headers):
    card_type = create_card_type(database)

    response = client.post("/memberships/purchase", headers=customer_headers,
                           json={**payment("order_unknown"), "card_type_id": card_type.id})

    assert response.status_code == 400
    assert response.json()["message"] == "Payment order does not match this purchase"


def test_order_for_one_card_type_cannot_buy_another(client, database, customer, customer_headers):
    cheap = create_card_type(database, name="Silver", price=99.0)
    premium = create_card_type(database, name="Platinum", price=4999.0)
    order_id = open_order(client, customer_headers, "membership_card", cheap.id)

    response = client.post("/memberships/purchase", headers=customer_headers,
                           json={**payment(order_id), "card_type_id": premium.id})

    assert response.status_code == 400
    assert active_cards(database, customer) == []


def test_order_of_another_user_is_rejected(client, database, customer_headers, other_customer):
    card_type = create_card_type(database)
    order_id = open_order(client, auth_headers(other_customer), "membership_card", card_type.id)

    response = client.post("/memberships/purchase", headers=customer_headers,
                           json={**payment(order_id), "card_type_id": card_type.id})

    assert response.status_code == 400


def test_price_change_after_order_is_rejected(client, database, customer, customer_headers):
    card_type = create_card_type(database, price=999.0)
    order_id = open_order(client, customer_headers, "membership_card", card_type.id)
    DBInterface(MembershipCardType, database).update(card_type.id, {"price": 1999.0})

    response = client.post("/memberships/purchase", headers=customer_headers,
                           json={**payment(order_id), "card_type_id": card_type.id})

    assert response.status_code == 400
    assert active_cards(database, customer) == []


def test_paid_order_cannot_be_replayed_after_expiry(client, database, customer, customer_headers):
    card_type = create_card_type(database)
    order_id = open_order(client, customer_headers, "membership_card", card_type.id)
    body = {**payment(order_id), "card_type_id": card_type.id}

    first = client.post("/memberships/purchase", headers=customer_headers, json=body)
    DBInterface(MembershipCard, database).update(
        first.json()["data"]["id"], {"expiry_date": utc_now() - datetime.timedelta(days=1)}
    )
    replay = client.post("/memberships/purchase", headers=customer_headers, json=body)

    assert first.status_code == 201
    assert replay.status_code == 409
    assert replay.json()["message"] == "This payment has already been used"
    assert active_cards(database, customer) == []


def test_payment_id_cannot_settle_a_second_order(client, database, customer, customer_headers):
    card_type = create_card_type(database)
    first_order = open_order(client, customer_headers, "membership_card", card_type.id)
    client.post("/memberships/purchase", headers=customer_headers,
                json={**payment(first_order), "card_type_id": card_type.id})
    DBInterface(MembershipCard, database).update(
        active_cards(database, customer)[0].id, {"status": MembershipStatus.cancelled}
    )
    second_order = open_order(client, customer_headers, "membership_card", card_type.id)

    response = client.post("/memberships/purchase", headers=customer_headers,
                           json={**payment(second_order, payment_id="pay_1"), "card_type_id": card_type.id})

    assert response.status_code == 409
    assert active_cards(database, customer) == []


def test_competing_purchase_keeps_a_single_active_card(client, database, razorpay, customer, customer_headers):
    card_type = create_card_type(database)
    order_id = open_order(client, customer_headers, "membership_card", card_type.id)

    def verify_while_another_purchase_lands(order_id, payment_id, signature):
        create_card(database, customer, create_card_type(database, name="Silver"))
        return True

    razorpay.verify_payment = verify_while_another_purchase_lands
    response = client.post("/memberships/purchase", headers=customer_headers,
                           json={**payment(order_id), "card_type_id": card_type.id})

    assert response.status_code == 409
    assert response.json()["message"] == "User already has an active membership card"
    assert len(active_cards(database, customer)) == 1
    order = DBInterface(PaymentOrder, database).read_single_by_fields([PaymentOrder.razorpay_order_id == order_id])
    assert order.status == PaymentOrderStatus.created


def test_my_membership_without_card(client, customer_headers):
    assert client.get("/memberships/me", headers=customer_headers).status_code == 404


def test_purchase_subscription_upgrades_user_type(client, database, customer, customer_headers):
    plan = create_plan(database)
    order_id = open_order(client, customer_headers, "cash_lending_subscription", plan.id)
    body = {**payment(order_id), "plan_id": plan.id}

    response = client.post("/subscriptions/purchase", headers=customer_headers, json=body)
    again = client.post("/subscriptions/purchase", headers=customer_headers, json=body)

    assert response.status_code == 201
    assert response.json()["data"]["status"] == "active"
    assert again.status_code == 409
    assert DBInterface(User, database).read_by_id(customer.id).user_type == UserType.cash_lending_customer
    assert client.get("/subscriptions/me", headers=customer_headers).json()["data"]["plan"]["name"] == "Monthly"


def test_subscription_with_bad_signature(client, database, customer_headers):
    plan = create_plan(database)
    order_id = open_order(client, customer_headers, "cash_lending_subscription", plan.id)

    response = client.post("/subscriptions/purchase", headers=customer_headers,
                           json={**payment(order_id, signature="forged"), "plan_id": plan.id})

    assert response.status_code == 400
    assert client.get("/subscriptions/me", headers=customer_headers).status_code == 404


def test_membership_order_cannot_buy_a_subscription(client, database, customer_headers):
    card_type = create_card_type(database, price=299.0)
    plan = create_plan(database, price=299.0)
    order_id = open_order(client, customer_headers, "membership_card", card_type.id)

    response = client.post("/subscriptions/purchase", headers=customer_headers,
                           json={**payment(order_id), "plan_id": plan.id})

    assert response.status_code == 400
    assert client.get("/subscriptions/me", headers=customer_headers).status_code == 404


def test_membership_payment_cannot_be_reused_for_a_subscription(client, database, customer_headers):
    card_type = create_card_type(database)
    plan = create_plan(database)
    card_order = open_order(client, customer_headers, "membership_card", card_type.id)
    client.post("/memberships/purchase", headers=customer_headers,
                json={**payment(card_order), "card_type_id": card_type.id})
    plan_order = open_order(client, customer_headers, "cash_lending_subscription", plan.id)

    response = client.post("/subscriptions/purchase", headers=customer_headers,
                           json={**payment(plan_order, payment_id="pay_1"), "plan_id": plan.id})

    assert response.status_code == 409
    assert response.json()["message"] == "This payment has already been used"
