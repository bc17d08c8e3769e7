from datetime import datetime

from services import dashboard

NOW = datetime(2024, 2, 15, 12, 0)


def test_month_keys_cross_year():
    assert dashboard.month_keys(NOW) == ["2023-09", "2023-10", "2023-11", "2023-12", "2024-01", "2024-02"]


def test_admin_stats(db, admin, agency, pilgrim, make_agency, make_package):
    make_agency(verified=False, created_at=datetime(2024, 1, 10))
    make_package(agency)
    make_package(package_type="Hajj")
    make_package(package_type="Ziyarah")
    db.bookings.insert_many([
        {"status": "confirmed", "total_price": 300000, "created_at": datetime(2024, 2, 1)},
        {"status": "pending", "total_price": 500000, "created_at": datetime(2023, 12, 5)},
        {"status": "pending", "total_price": 500000, "created_at": datetime(2022, 1, 1)},
    ])
    db.payments.insert_many([
        {"amount": 300000, "status": "confirmed", "method": "paystack", "date": datetime(2024, 2, 1)},
        {"amount": 100000, "status": "confirmed", "method": "paystack", "date": datetime(2023, 12, 5)},
        {"amount": 400000, "status": "pending", "method": "bank_transfer", "date": datetime(2024, 2, 2)},
    ])

    stats = dashboard.admin_stats(db, now=NOW)

    assert stats["total_agencies"] == 2
    assert stats["verified_agencies"] == 1
    assert stats["pending_verifications"] == 1
    assert stats["total_bookings"] == 3
    assert stats["total_revenue"] == 400000
    monthly = stats["monthly_summary"]
    assert monthly["revenue"]["2024-02"] == 300000
    assert monthly["revenue"]["2023-12"] == 100000
    assert monthly["bookings"] == {"2023-09": 0, "2023-10": 0, "2023-11": 0,
                                   "2023-12": 1, "2024-01": 0, "2024-02": 1}
    assert monthly["user_growth"]["agencies"]["2024-01"] == 1
    assert stats["distributions"]["booking_statuses"] == {"confirmed": 1, "pending": 2}
    assert stats["distributions"]["package_types"] == {"Hajj": 1, "Umrah": 1, "Other": 1}
    assert stats["distributions"]["payment_methods"] == {"paystack": 2, "bank_transfer": 1}


def test_agency_stats_package_performance(db, agency, make_package):
    full = make_package(agency, title="Small group", group_size=10)
    default = make_package(agency, title="Default size", status="draft")
    bookings = [{"package_id": full["_id"], "status": "confirmed", "total_price": 500000} for _ in range(3)]
    bookings.append({"package_id": full["_id"], "status": "cancelled", "total_price": 500000})
    bookings.append({"package_id": default["_id"], "status": "pending", "total_price": 200000,
                     "departure_date": datetime(2024, 5, 1)})
    for b in bookings:
        b.update({"agency_id": agency["_id"], "created_at": datetime(2024, 2, 1), "amount_paid": 0})
    db.bookings.insert_many(bookings)

    stats = dashboard.agency_stats(db, agency["_id"], now=NOW)

    assert stats["total_bookings"] == 5
    assert stats["confirmed_bookings"] == 3
    assert stats["cancelled_bookings"] == 1
    assert stats["total_revenue"] == 2200000
    assert stats["confirmed_revenue"] == 1500000
    assert stats["active_packages"] == 1
    assert stats["draft_packages"] == 1
    assert len(stats["upcoming_bookings"]) == 1
    perf = {p["title"]: p for p in stats["package_performance"]}
    assert perf["Small group"]["fill_percentage"] == 30
    assert perf["Small group"]["spots_left"] == 7
    assert perf["Default size"]["max_capacity"] == 20
    assert perf["Default size"]["fill_percentage"] == 5


def test_package_fill_is_capped():
    packages = [{"_id": 1, "title": "Tiny", "group_size": 2}]
    bookings = [{"package_id": 1, "status": "confirmed"} for _ in range(5)]

    perf = dashboard.package_performance(packages, bookings)[0]
    assert perf["fill_percentage"] == 100
    assert perf["spots_left"] == 0


def test_pilgrim_stats(db, pilgrim):
    db.bookings.insert_many([
        {"user_id": pilgrim["_id"], "status": "pending", "payment_status": "partial payment",
         "total_price": 500000, "amount_paid": 100000, "departure_date": datetime(2024, 6, 1),
         "created_at": datetime(2024, 1, 1)},
        {"user_id": pilgrim["_id"], "status": "confirmed", "payment_status": "paid",
         "total_price": 300000, "amount_paid": 300000, "departure_date": datetime(2024, 3, 1),
         "created_at": datetime(2024, 1, 2)},
        {"user_id": pilgrim["_id"], "status": "completed", "payment_status": "paid",
         "total_price": 250000, "amount_paid": 250000, "departure_date": datetime(2023, 6, 1),
         "created_at": datetime(2023, 1, 1)},
    ])

    stats = dashboard.pilgrim_stats(db, pilgrim["_id"], now=NOW)

    assert stats["total_bookings"] == 3
    assert stats["completed_bookings"] == 1
    assert stats["total_paid"] == 650000
    assert stats["outstanding_balance"] == 400000
    assert [b["total_price"] for b in stats["upcoming_bookings"]] == [300000, 500000]
    assert stats["next_trip"]["total_price"] == 300000
