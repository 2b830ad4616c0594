#!/usr/bin/env python3
"""
run_demo.py - End-to-end demo against a running shop backend
- Logs in the admin created by `scripts/seed.py --admin-email ...`
- Admin creates a category and a product, sets stock
- Customer registers, logs in, adds to cart, places an order
- Admin checks the dashboard, moves the order to "shipped", pulls reports
"""

import requests
import json
import os
from datetime import date
from typing import Dict, Any, Optional, List


class DemoRunner:
    def __init__(self):
        self.base_url = os.getenv("SHOP_URL", "http://localhost:8000")

        self.admin_email = os.getenv("ADMIN_EMAIL", "admin@example.com")
        self.admin_pass = os.getenv("ADMIN_PASSWORD", "P@ssw0rd!")
        self.cust_email = "cust@example.com"
        self.cust_pass = "P@ssw0rd!"

        self.admin_token: Optional[str] = None
        self.cust_token: Optional[str] = None
        self.cust_id: Optional[int] = None

    # ---------- helpers ----------
    def show_step(self, title: str):
        print(f"\n=== {title} ===")

    def mask_token(self, token: str) -> str:
        if not token:
            return "<none>"
        return token if len(token) <= 12 else f"{token[:8]}...{token[-6:]}"

    def auth(self, token: Optional[str]) -> Dict[str, str]:
        return {"Authorization": f"Bearer {token}"} if token else {}

    def call_api(
        self,
        method: str,
        path: str,
        headers: Optional[Dict] = None,
        data: Optional[Any] = None,
        params: Optional[Dict] = None,
        expected_status: List[int] = [200, 201],
        timeout: int = 30,
    ) -> Dict[str, Any]:
        url = f"{self.base_url}{path}"
        print(f"\n-> {method} {url}")
        if data is not None:
            print(f"   Body: {json.dumps(data, indent=2)}")
        try:
            resp = requests.request(method=method, url=url, headers=headers, json=data, params=params, timeout=timeout)
        except requests.exceptions.RequestException as e:
            print(f"   Error: \033[91m{e}\033[0m")
            return {"status": None, "data": None, "error": str(e)}

        status_color = "\033[92m" if resp.status_code in expected_status else "\033[93m"
        print(f"   Status: {status_color}{resp.status_code}\033[0m")
        try:
            js = resp.json()
            print(json.dumps(js, indent=2))
        except json.JSONDecodeError:
            js = None
            print(resp.text)
        return {"status": resp.status_code, "data": js}

    # ---------- flow ----------
    def run_demo(self):
        print("Starting shop backend demo")
        print("=" * 50)

        self.show_step("Preflight: health")
        self.call_api("GET", "/health", expected_status=[200])

        self.show_step("Admin: login")
        lr = self.call_api("POST", "/login", data={"email": self.admin_email, "password": self.admin_pass})
        self.admin_token = (lr.get("data") or {}).get("access_token")
        print(f"Admin access token: {self.mask_token(self.admin_token)}")
        if not self.admin_token:
            print("\033[93mHint: run `scripts/seed.py --admin-email ... --admin-password ...` first.\033[0m")
            return
        admin = self.auth(self.admin_token)

        self.show_step("Admin: create category + product")
        cat = self.call_api("POST", "/categories", headers=admin, data={"name": "Shoes", "description": "Footwear"})
        cat_id = (cat.get("data") or {}).get("id")
        prod = self.call_api(
            "POST", "/products", headers=admin,
            data={"name": "Air Zoom", "price": 129.99, "description": "Runner", "stock": 5, "categoryId": cat_id},
        )
        product_id = (prod.get("data") or {}).get("id")
        self.call_api("PUT", f"/admin/products/{product_id}/stock", headers=admin, data={"stock": 50})

        self.show_step("Customer: register + login")
        self.call_api(
            "POST", "/register",
            data={"name": "Demo Customer", "email": self.cust_email, "password": self.cust_pass},
            expected_status=[201, 409],
        )
        clr = self.call_api("POST", "/login", data={"email": self.cust_email, "password": self.cust_pass})
        cdata = clr.get("data") or {}
        self.cust_token = cdata.get("access_token")
        self.cust_id = (cdata.get("user") or {}).get("id")
        cust = self.auth(self.cust_token)

        self.show_step("Customer: cart")
        self.call_api("POST", "/cart", headers=cust, data={"userId": self.cust_id, "productId": product_id, "quantity": 2})
        self.call_api("GET", f"/cart/{self.cust_id}", headers=cust)

        self.show_step("Customer: place order")
        order = self.call_api(
            "POST", "/orders", headers=cust,
            data={
                "userId": self.cust_id,
                "totalAmount": 259.98,
                "shippingAddress": "1 Demo Street, Dublin",
                "items": [{"productId": product_id, "quantity": 2, "price": 129.99}],
            },
        )
        order_id = (order.get("data") or {}).get("orderId")
        self.call_api("DELETE", f"/cart/{self.cust_id}/{product_id}", headers=cust)
        self.call_api("GET", f"/orders/{self.cust_id}", headers=cust)

        self.show_step("Customer: admin routes are refused")
        self.call_api("GET", "/admin/dashboard", headers=cust, expected_status=[403])

        self.show_step("Admin: dashboard, orders, reports")
        self.call_api("GET", "/admin/dashboard", headers=admin)
        if order_id:
            self.call_api("PUT", f"/admin/orders/{order_id}", headers=admin, data={"status": "shipped"})
        today = date.today().isoformat()
        self.call_api("GET", "/admin/reports/sales", headers=admin, params={"start_date": today, "end_date": today})
        self.call_api("GET", "/admin/reports/top-products", headers=admin)
        self.call_api("GET", "/admin/reports/customer-analytics", headers=admin)

        print("\n\033[92m=== DEMO COMPLETE ===\033[0m")


if __name__ == "__main__":
    DemoRunner().run_demo()
