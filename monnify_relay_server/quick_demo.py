#!/usr/bin/env python3
"""Quick demo of the relay against a running server."""

import json
import os
import sys

import requests

BASE_URL = os.environ.get("RELAY_URL", "http://localhost:5000")
NIN = sys.argv[1] if len(sys.argv) > 1 else "12345678901"

print("=" * 80)
print(" QUICK RELAY DEMO")
print("=" * 80)

# Test 1: Liveness
print("\n1. Checking the API is live...")
response = requests.get(f"{BASE_URL}/")
print(f"Status: {response.status_code}")
print(f"Response: {response.json()}")

# Test 2: Token only
print("\n2. Authenticating with Monnify (no NIN)...")
response = requests.post(f"{BASE_URL}/nin-details", json={})
print(f"Status: {response.status_code}")
if response.status_code == 200:
    data = response.json()
    print("✅ Authenticated!")
    print(f"   Token: {data['accessToken'][:16]}...")
    print(f"   Expires in: {data['expiresIn']}s")
else:
    print(f"Response: {response.text}")

# Test 3: Token plus NIN lookup
print(f"\n3. Looking up NIN {NIN}...")
response = requests.post(f"{BASE_URL}/nin-details", json={"nin": NIN})
print(f"Status: {response.status_code}")
if response.status_code == 200:
    print("✅ Lookup completed!")
    print(json.dumps(response.json()["ninDetails"], indent=2))
else:
    print(f"Response: {response.text}")

# Test 4: Demo external call
print("\n4. Calling the demo external API...")
response = requests.get(f"{BASE_URL}/api")
print(f"Status: {response.status_code}")
print(f"Response: {response.json()}")

# Test 5: Unknown route
print("\n5. Requesting a route that does not exist...")
response = requests.get(f"{BASE_URL}/obviously/this/route/cant/exist")
print(f"Status: {response.status_code}")
print(f"Response: {response.json()}")

print("\n" + "=" * 80)
print(" Docs: " + f"{BASE_URL}/docs")
print("=" * 80)
