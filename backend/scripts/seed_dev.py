import requests

BASE_URL = "http://localhost:8000"


def create_user():
    user_data = {
        "username": "dev",
        "email": "dev@example.com",
        "authentication": {
            "password": "testpassword",
            "salt": "devsalt",
        },
    }
    response = requests.post(f"{BASE_URL}/users/", json=user_data)
    response.raise_for_status()
    user_id = response.json()["id"]
    return user_id


def list_users():
    response = requests.get(f"{BASE_URL}/users/")
    response.raise_for_status()
    return response.json()


if __name__ == "__main__":
    user_id = create_user()
    print(f"Created user {user_id}")
    print(f"{len(list_users())} users in the collection")
