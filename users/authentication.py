from rest_framework.authentication import TokenAuthentication


class BearerTokenAuthentication(TokenAuthentication):
    """Token auth that reads `Authorization: Bearer <key>`"""
    keyword = 'Bearer'
