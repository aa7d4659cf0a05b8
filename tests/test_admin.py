from fastapi import status

from app.models import OrderStatus, PaymentStatus, User
from helpers import bearer, create_order


def test_admin_lists_all_orders(client, admin_headers, customer, other_customer, db):
    create_order(db)
    create_order(db, customer_email="other@x.com", chef_id="c2")

    response = client.get("/admin/orders", headers=admin_headers)

    assert response.status_code == status.HTTP_200_OK
    assert {o["customerEmail"] for o in response.json()} == {"u@x.com", "other@x.com"}


def test_non_admin_cannot_list_all_orders(client, customer_headers, chef_headers):
    assert client.get("/admin/orders", headers=customer_headers).status_code == status.HTTP_403_FORBIDDEN
    assert client.get("/admin/orders", headers=chef_headers).status_code == status.HTTP_403_FORBIDDEN


def test_admin_stats(client, admin_headers, db):
    create_order(db, order_status=OrderStatus.ACCEPTED, payment_status=PaymentStatus.PAID)
    create_order(db, price=12.5, order_status=OrderStatus.REJECTED, payment_status=PaymentStatus.PAID)
    create_order(db, price=99)

    response = client.get("/admin/stats", headers=admin_headers)

    assert response.status_code == status.HTTP_200_OK
    data = response.json()
    assert data["totalOrders"] == 3
    assert data["paidOrders"] == 2
    assert data["revenue"] == "32.50"
    assert data["ordersByStatus"] == {"pending": 1, "accepted": 1, "rejected": 1, "cancelled": 0}


def test_admin_stats_empty(client, admin_headers):
    response = client.get("/admin/stats", headers=admin_headers)

    assert response.status_code == status.HTTP_200_OK
    assert response.json()["revenue"] == "0.00"
    assert response.json()["totalOrders"] == 0


def test_grant_chef_role_assigns_chef_id_once(client, admin_headers, customer, db):
    response = client.put(f"/admin/users/{customer.id}/role", json={"role": "chef"}, headers=admin_headers)

    assert response.status_code == status.HTTP_200_OK
    data = response.json()
    assert data["role"] == "chef"
    assert data["chefId"].startswith("chef-")

    chef_id = data["chefId"]
    client.put(f"/admin/users/{customer.id}/role", json={"role": "customer"}, headers=admin_headers)
    response = client.put(f"/admin/users/{customer.id}/role", json={"role": "chef"}, headers=admin_headers)

    assert response.json()["chefId"] == chef_id
    db.refresh(customer)
    assert customer.role == "chef"


def test_granted_chef_can_list_incoming(client, admin_headers, customer):
    client.put(f"/admin/users/{customer.id}/role", json={"role": "chef"}, headers=admin_headers)

    response = client.get("/orders/incoming", headers=bearer(customer))

    assert response.status_code == status.HTTP_200_OK
    assert response.json() == []


def test_grant_role_unknown_user(client, admin_headers):
    response = client.put("/admin/users/9999/role", json={"role": "chef"}, headers=admin_headers)
    assert response.status_code == status.HTTP_404_NOT_FOUND


def test_grant_role_invalid_role(client, admin_headers, customer):
    response = client.put(f"/admin/users/{customer.id}/role", json={"role": "overlord"}, headers=admin_headers)

    assert response.status_code == status.HTTP_400_BAD_REQUEST
    assert response.json()["kind"] == "validation_error"


def test_non_admin_cannot_grant_role(client, customer_headers, customer, db):
    response = client.put(f"/admin/users/{customer.id}/role", json={"role": "admin"}, headers=customer_headers)

    assert response.status_code == status.HTTP_403_FORBIDDEN
    assert db.query(User).filter(User.id == customer.id).one().role == "customer"
