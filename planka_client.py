import logging
from urllib.parse import urljoin

import requests

from auth_manager import CredentialsAuth, StaticTokenAuth, TokenCache
from planka_errors import PlankaHTTPError, PlankaJSONError, PlankaStatusError
from planka_records import DEFAULT_POSITION, to_record, to_record_list

logger = logging.getLogger('planka_client')


class PlankaClient:
    """
    Client for the Planka REST API using a bearer token.
    """

    def __init__(self, base_url, auth):
        """
        Initialize the Planka client.

        Args:
            base_url (str): Planka server URL, e.g. https://planka.example.com
            auth: Token provider with resolve() and invalidate()
                (StaticTokenAuth or CredentialsAuth)
        """
        self.base_url = base_url
        self.auth = auth

    @classmethod
    def from_settings(cls, settings, cache=None):
        """Build a client from planka_config.Settings, choosing the auth mode."""
        if settings.uses_static_token:
            auth = StaticTokenAuth(settings.token)
        else:
            auth = CredentialsAuth(settings.base_url, settings.email, settings.password,
                                   cache=cache if cache is not None else TokenCache())
        logger.info(f"Planka client configured for {settings.base_url}")
        return cls(settings.base_url, auth)

    def _headers(self):
        return {
            "Authorization": f"Bearer {self.auth.resolve()}",
            "Content-Type": "application/json",
        }

    def _send(self, method, path, data=None):
        """Send an authenticated request and return the raw 2xx response.

        Raises:
            PlankaStatusError: non-2xx status, with the raw body
            PlankaHTTPError: the request could not be sent
        """
        headers = self._headers()
        url = urljoin(self.base_url, path)
        logger.debug(f"{method} {url}")
        if data is not None:
            logger.debug(f"Request body: {data}")

        try:
            response = requests.request(method, url, headers=headers, json=data)
        except requests.RequestException as e:
            logger.error(f"Failed to send {method} {path}: {e}")
            raise PlankaHTTPError(str(e)) from e

        if not 200 <= response.status_code < 300:
            logger.error(f"API request failed: {method} {path} -> {response.status_code} - {response.text}")
            if response.status_code == 401:
                self.auth.invalidate()
            raise PlankaStatusError(response.status_code, response.text)
        return response

    def _json(self, response, path):
        try:
            data = response.json()
        except ValueError as e:
            logger.error(f"Failed to parse response JSON from {path}: {e}")
            raise PlankaJSONError(str(e)) from e
        if not isinstance(data, dict):
            raise PlankaJSONError(f"expected object from {path}, got {type(data).__name__}")
        return data

    def get(self, path):
        """Make a GET request to the Planka API and decode the JSON body."""
        return self._json(self._send('GET', path), path)

    def post(self, path, data=None):
        """Make a POST request to the Planka API and decode the JSON body."""
        return self._json(self._send('POST', path, data), path)

    def patch(self, path, data=None):
        """Make a PATCH request to the Planka API and decode the JSON body."""
        return self._json(self._send('PATCH', path, data), path)

    def delete(self, path):
        """Make a DELETE request to the Planka API. The body is not inspected."""
        self._send('DELETE', path)

    @staticmethod
    def _item(data, record_type):
        if "item" not in data:
            raise PlankaJSONError("missing field `item`")
        return to_record(data["item"], record_type)

    @staticmethod
    def _included(data, collection, record_type):
        included = data.get("included")
        if not isinstance(included, dict):
            raise PlankaJSONError("missing field `included`")
        return to_record_list(included.get(collection, []), record_type)

    # Project methods
    def list_projects(self):
        """Get all projects visible to the current user."""
        data = self.get('/api/projects')
        if "items" not in data:
            raise PlankaJSONError("missing field `items`")
        projects = to_record_list(data["items"], "project")
        logger.info(f"Listed {len(projects)} projects")
        return projects

    # Board methods
    def list_boards(self, project_id):
        """Get the boards of a project.

        Planka has no board listing endpoint; boards come back in the
        "included" section of the project itself.
        """
        data = self.get(f'/api/projects/{project_id}')
        boards = self._included(data, "boards", "board")
        logger.info(f"Listed {len(boards)} boards for project {project_id}")
        return boards

    def create_board(self, project_id, name):
        """Create a board at the end of a project."""
        logger.info(f"Creating board {name!r} in project {project_id}")
        data = self.post(f'/api/projects/{project_id}/boards', {
            "name": name,
            "position": DEFAULT_POSITION,
        })
        return self._item(data, "board")

    # List methods
    def list_lists(self, board_id):
        """Get the lists (columns) of a board from its "included" section."""
        data = self.get(f'/api/boards/{board_id}')
        lists = self._included(data, "lists", "list")
        logger.info(f"Listed {len(lists)} lists for board {board_id}")
        return lists

    def create_list(self, board_id, name):
        """Create a list at the end of a board."""
        logger.info(f"Creating list {name!r} on board {board_id}")
        data = self.post(f'/api/boards/{board_id}/lists', {
            "name": name,
            "position": DEFAULT_POSITION,
        })
        return self._item(data, "list")

    def delete_list(self, list_id):
        """Delete a list. Planka removes its cards along with it."""
        logger.warning(f"Deleting list {list_id} and all its cards")
        self.delete(f'/api/lists/{list_id}')

    # Card methods
    def list_cards(self, board_id):
        """Get every card on a board from its "included" section."""
        data = self.get(f'/api/boards/{board_id}')
        cards = self._included(data, "cards", "card")
        logger.info(f"Listed {len(cards)} cards for board {board_id}")
        return cards

    def create_card(self, list_id, name, card_type="project", description=None,
                    due_date=None, is_due_completed=None, stopwatch=None):
        """
        Create a card at the end of a list.

        Args:
            list_id (str): Target list ID
            name (str): Card title
            card_type (str): 'project' or 'story'
            description (str, optional): Card description
            due_date (str, optional): ISO 8601 due date
            is_due_completed (bool, optional): Whether the due date is done
            stopwatch (dict, optional): {"startedAt": ..., "total": ...}

        Returns:
            dict: The created card record
        """
        logger.info(f"Creating {card_type} card {name!r} in list {list_id}")
        body = {
            "type": card_type,
            "name": name,
            "position": DEFAULT_POSITION,
        }
        if description is not None:
            body["description"] = description
        if due_date is not None:
            body["dueDate"] = due_date
        if is_due_completed is not None:
            body["isDueCompleted"] = is_due_completed
        if stopwatch is not None:
            body["stopwatch"] = stopwatch

        data = self.post(f'/api/lists/{list_id}/cards', body)
        return self._item(data, "card")

    def update_card(self, card_id, name=None, description=None, card_type=None, due_date=None,
                    is_due_completed=None, board_id=None, cover_attachment_id=None):
        """
        Update a card. Only the arguments that are not None are sent;
        there is no way to clear a field.

        Returns:
            dict: The updated card record
        """
        logger.info(f"Updating card {card_id}")
        body = {}
        if name is not None:
            body["name"] = name
        if description is not None:
            body["description"] = description
        if card_type is not None:
            body["type"] = card_type
        if due_date is not None:
            body["dueDate"] = due_date
        if is_due_completed is not None:
            body["isDueCompleted"] = is_due_completed
        if board_id is not None:
            body["boardId"] = board_id
        if cover_attachment_id is not None:
            body["coverAttachmentId"] = cover_attachment_id

        data = self.patch(f'/api/cards/{card_id}', body)
        return self._item(data, "card")

    def move_card(self, card_id, list_id, position=None):
        """Move a card to another list, at the end unless a position is given."""
        logger.info(f"Moving card {card_id} to list {list_id}")
        data = self.patch(f'/api/cards/{card_id}', {
            "listId": list_id,
            "position": DEFAULT_POSITION if position is None else position,
        })
        return self._item(data, "card")

    def delete_card(self, card_id):
        """Delete a card."""
        logger.warning(f"Deleting card {card_id}")
        self.delete(f'/api/cards/{card_id}')
