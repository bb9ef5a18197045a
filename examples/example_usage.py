"""Example API wrapper built on APIClient."""

from apicaller import APIClient

BASE_URL = "https://jsonplaceholder.typicode.com"


class JsonPlaceholder(APIClient):
    """Wrapper exposing a few JSONPlaceholder endpoints."""

    def __init__(self, **kwargs):
        super().__init__(url=BASE_URL, **kwargs)

    def todo(self, todo_id):
        self.set_method("GET")
        return self.call(f"/todos/{todo_id}")

    def todos_for_user(self, user_id):
        self.set_method("GET")
        return self.call("/todos", {"userId": user_id})

    def create_post(self, title, body, user_id):
        self.set_method("POST")
        return self.call("/posts", {"title": title, "body": body, "userId": user_id}, "json")


def main():
    with JsonPlaceholder() as api:
        print(api.todo(1))
        print(len(api.todos_for_user(1) or []))
        print(api.create_post("Hello", "From apicaller", 1))

        last_call = api.get_last_call()
        print(last_call.url, last_call.params)


if __name__ == "__main__":
    main()
