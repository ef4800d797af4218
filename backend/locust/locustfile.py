"""
Locust Load Test Suite

Run scenarios:
  locust -f locustfile.py --tags contention  # Overlapping creates on one space
  locust -f locustfile.py --tags throughput  # Cached space listing
  locust -f locustfile.py --tags edge        # Bad input
  locust -f locustfile.py                    # All tests
"""

import random
import string
from datetime import date, timedelta

from locust import HttpUser, task, between, tag, events

PASSWORD = "loadtest123"

# Shared state
SPACE_IDS = []
CONTENTION_SPACE_ID = None
CONTENTION_DATE = (date.today() + timedelta(days=60)).isoformat()


def random_email():
    return f"load_{random.randint(100000, 999999)}@test.com"


def random_username():
    return "u_" + "".join(random.choices(string.ascii_lowercase, k=8))


def register_and_login(client, role="client"):
    email = random_email()
    client.post("/api/v1/auth/register", json={
        "email": email,
        "username": random_username(),
        "password": PASSWORD,
        "role": role,
    })
    resp = client.post("/api/v1/auth/login", json={"email": email, "password": PASSWORD})
    if resp.status_code != 200:
        return {}
    return {"Authorization": f"Bearer {resp.json()['access_token']}"}


def booking_body(space_id, event_date, start_hour, hours=2):
    return {
        "space_id": space_id,
        "booking_kind": "single",
        "event_date": event_date,
        "start_time": f"{event_date}T{start_hour:02d}:00:00Z",
        "end_time": f"{event_date}T{start_hour + hours:02d}:00:00Z",
        "client_name": "Load Tester",
        "client_email": "load@test.com",
        "client_phone": "0772000000",
    }


@events.test_start.add_listener
def on_test_start(environment, **kwargs):
    print("\n" + "=" * 60)
    print(f"Contention date: {CONTENTION_DATE}")
    print("=" * 60)


class ContentionUser(HttpUser):
    """
    TEST 1: Double-booking - every user requests overlapping slots
    on the same hourly space and the same day.

    Run: locust -f locustfile.py --tags contention -u 100 -r 50 --run-time 30s

    After test, verify no two active bookings overlap:
      SELECT a.id, b.id FROM bookings a JOIN bookings b
        ON a.space_id = b.space_id AND a.id < b.id
       AND a.slot_start < b.slot_end AND b.slot_start < a.slot_end
     WHERE a.space_id = X
       AND a.status NOT IN ('cancelled', 'declined')
       AND b.status NOT IN ('cancelled', 'declined');
    Should return zero rows.
    """
    wait_time = between(0, 0.1)

    def on_start(self):
        global CONTENTION_SPACE_ID
        if CONTENTION_SPACE_ID is None:
            owner_headers = register_and_login(self.client, role="owner")
            resp = self.client.post("/api/v1/spaces/", json={
                "name": "Contention Hall",
                "description": "Everyone wants this room",
                "price": {"amount": "10000", "unit": "hour"},
            }, headers=owner_headers)
            if resp.status_code == 201 and CONTENTION_SPACE_ID is None:
                CONTENTION_SPACE_ID = resp.json()["id"]
                print(f"\n✓ Created contention space {CONTENTION_SPACE_ID}\n")
        self.headers = register_and_login(self.client)

    @tag("contention")
    @task
    def book_overlapping_slot(self):
        if not CONTENTION_SPACE_ID or not self.headers:
            return

        # 2h windows starting 09:00-12:00 all overlap their neighbours
        start_hour = random.randint(9, 12)
        with self.client.post(
            "/api/v1/bookings/",
            json=booking_body(CONTENTION_SPACE_ID, CONTENTION_DATE, start_hour),
            headers=self.headers,
            name="/api/v1/bookings/ [contended]",
            catch_response=True,
        ) as resp:
            if resp.status_code == 201:
                resp.success()
            elif resp.status_code == 400 and resp.json().get("error") == "Conflict":
                resp.success()  # Expected: slot taken
            elif resp.status_code == 409:
                resp.success()  # Expected: lost the calendar claim on every retry
            else:
                resp.failure(f"Unexpected: {resp.status_code}")


class ThroughputUser(HttpUser):
    """
    TEST 2: Throughput - cache effectiveness on the space listing

    Run twice (with Redis, then REDIS_ENABLED=false):
      locust -f locustfile.py --tags throughput -u 100 -r 20 --run-time 60s

    Compare avg response time, requests/sec and P95/P99 latency.
    """
    wait_time = between(0.1, 0.5)

    @tag("throughput", "read")
    @task(10)
    def list_spaces_cached(self):
        page = random.randint(1, 5)
        resp = self.client.get(
            f"/api/v1/spaces/?page={page}&page_size=20",
            name="/api/v1/spaces/ [cached]",
        )
        if resp.status_code == 200:
            for space in resp.json().get("spaces", []):
                if space["id"] not in SPACE_IDS:
                    SPACE_IDS.append(space["id"])

    @tag("throughput", "read")
    @task(3)
    def get_space_detail(self):
        if SPACE_IDS:
            self.client.get(f"/api/v1/spaces/{random.choice(SPACE_IDS)}", name="/api/v1/spaces/{id}")

    @tag("throughput")
    @task(1)
    def health_check(self):
        self.client.get("/health")


class EdgeCaseUser(HttpUser):
    """
    TEST 3: Edge cases - bad input must produce structured 4xx errors, never 5xx.

    Run: locust -f locustfile.py --tags edge -u 20 -r 5 --run-time 30s
    """
    wait_time = between(0.5, 1.5)

    def on_start(self):
        self.headers = register_and_login(self.client)

    def _expect(self, resp, codes):
        if resp.status_code in codes:
            resp.success()
        else:
            resp.failure(f"Expected {codes}, got {resp.status_code}")

    @tag("edge")
    @task
    def missing_space(self):
        with self.client.post(
            "/api/v1/bookings/",
            json=booking_body(999999, CONTENTION_DATE, 10),
            headers=self.headers,
            catch_response=True,
        ) as resp:
            self._expect(resp, [404])

    @tag("edge")
    @task
    def reversed_times(self):
        body = booking_body(SPACE_IDS[0] if SPACE_IDS else 1, CONTENTION_DATE, 10)
        body["start_time"], body["end_time"] = body["end_time"], body["start_time"]
        with self.client.post("/api/v1/bookings/", json=body, headers=self.headers, catch_response=True) as resp:
            self._expect(resp, [400, 404])

    @tag("edge")
    @task
    def zero_guests(self):
        body = booking_body(1, CONTENTION_DATE, 10)
        body["guests"] = 0
        with self.client.post("/api/v1/bookings/", json=body, headers=self.headers, catch_response=True) as resp:
            self._expect(resp, [400])

    @tag("edge")
    @task
    def unknown_kind(self):
        body = booking_body(1, CONTENTION_DATE, 10)
        body["booking_kind"] = "weekly"
        with self.client.post("/api/v1/bookings/", json=body, headers=self.headers, catch_response=True) as resp:
            self._expect(resp, [400])

    @tag("edge")
    @task
    def malformed_json(self):
        with self.client.post(
            "/api/v1/bookings/",
            data="not json at all",
            headers={**self.headers, "Content-Type": "application/json"},
            catch_response=True,
        ) as resp:
            self._expect(resp, [400])

    @tag("edge")
    @task
    def missing_auth(self):
        with self.client.post(
            "/api/v1/bookings/", json=booking_body(1, CONTENTION_DATE, 10), catch_response=True
        ) as resp:
            self._expect(resp, [401])


class RealisticUser(HttpUser):
    """
    TEST 4: Realistic mixed workload

    Run: locust -f locustfile.py -u 200 -r 20 --run-time 120s

    Mostly browsing, some bookings spread over many days (low contention).
    """
    wait_time = between(1, 3)

    def on_start(self):
        self.headers = register_and_login(self.client)

    @task(50)
    def browse_spaces(self):
        resp = self.client.get("/api/v1/spaces/?page=1&page_size=20")
        if resp.status_code == 200:
            for space in resp.json().get("spaces", []):
                if space["id"] not in SPACE_IDS:
                    SPACE_IDS.append(space["id"])

    @task(20)
    def view_space(self):
        if SPACE_IDS:
            self.client.get(f"/api/v1/spaces/{random.choice(SPACE_IDS)}", name="/api/v1/spaces/{id}")

    @task(10)
    def book_space(self):
        if SPACE_IDS and self.headers:
            day = (date.today() + timedelta(days=random.randint(1, 365))).isoformat()
            self.client.post(
                "/api/v1/bookings/",
                json=booking_body(random.choice(SPACE_IDS), day, random.randint(8, 18), hours=1),
                headers=self.headers,
                name="/api/v1/bookings/",
            )

    @task(3)
    def my_bookings(self):
        if self.headers:
            self.client.get("/api/v1/bookings/?sort=latest", headers=self.headers)
