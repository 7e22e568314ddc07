from locust import HttpUser, task, between
import random

CATEGORIES = ["tools", "fabric", "spices", "stationery"]


class WholesalerUser(HttpUser):
    wait_time = between(0.5, 1.5)

    def on_start(self):
        # Sign up and log in a fresh wholesaler for this simulated client
        email = f"wholesaler_{random.randint(1, 1_000_000)}@example.com"
        self.client.post("/api/signup", json={"name": email, "email": email, "password": "load-test", "role": "wholesaler"})
        r = self.client.post("/api/login", json={"email": email, "password": "load-test"})
        self.headers = {"Authorization": f"Bearer {r.json()['token']}"} if r.status_code == 200 else None

    @task(1)
    def add_product(self):
        if not self.headers:
            return
        payload = {"name": f"item-{random.randint(1, 10_000)}", "price": round(random.random() * 100, 2), "category": random.choice(CATEGORIES)}
        self.client.post("/api/products", json=payload, headers=self.headers)

    @task(2)
    def my_products(self):
        if not self.headers:
            return
        self.client.get("/api/products/my", headers=self.headers)


class ShopperUser(HttpUser):
    wait_time = between(0.1, 0.5)

    @task(3)
    def search(self):
        self.client.get("/api/products", params={"search": random.choice(CATEGORIES)})

    @task(1)
    def place_order(self):
        self.client.post("/api/orders", json={"productName": "item", "price": 10, "quantity": random.randint(1, 5)})
