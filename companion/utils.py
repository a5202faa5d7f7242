from rest_framework.exceptions import ValidationError


def request_body(request):
    """Parsed request body, rejecting anything that is not a JSON object."""
    data = request.data
    if not isinstance(data, dict):
        raise ValidationError('Invalid request body')
    return data
