# clientdb/services/secrets.py
import boto3
import logging
from typing import Optional
from botocore.exceptions import BotoCoreError, ClientError
from clientdb.config import Settings

logger = logging.getLogger(__name__)


class SecretResolutionError(Exception):
    """A required secret could not be fetched; fatal at startup."""


class SecretsService:
    """
    Reads named secrets from AWS Secrets Manager.

    Secret ids are namespaced by SECRETS_PROJECT when it is set, so
    "DATABASE_URL" in project "clients-prod" is read from
    "clients-prod/DATABASE_URL".
    """

    def __init__(self, settings: Settings, client=None):
        self.project = settings.SECRETS_PROJECT
        self.client = client or boto3.client('secretsmanager', region_name=settings.AWS_REGION)

    def secret_id(self, secret_name: str) -> str:
        return f"{self.project}/{secret_name}" if self.project else secret_name

    def resolve(self, secret_name: str) -> str:
        """
        Fetch the current version of a secret.

        Args:
            secret_name: Name of the secret, without project prefix

        Returns:
            Secret value as a string

        Raises:
            SecretResolutionError: If the store is unreachable or the secret is missing/empty
        """
        secret_id = self.secret_id(secret_name)
        try:
            response = self.client.get_secret_value(
                SecretId=secret_id,
                VersionStage='AWSCURRENT'
            )
        except ClientError as e:
            code = e.response.get('Error', {}).get('Code', 'Unknown')
            raise SecretResolutionError(f"Failed to fetch secret '{secret_id}': {code}") from e
        except BotoCoreError as e:
            raise SecretResolutionError(f"Failed to fetch secret '{secret_id}': {str(e)}") from e

        if response.get('SecretString'):
            return response['SecretString']
        if response.get('SecretBinary'):
            return response['SecretBinary'].decode('utf-8')

        raise SecretResolutionError(f"Secret '{secret_id}' has no value")


def resolve_database_url(settings: Settings, secrets: Optional[SecretsService] = None) -> str:
    """
    Database URL for this process.

    Production reads it from the secret store; every other environment
    uses DATABASE_URL from the environment or .env.
    """
    if settings.is_production:
        logger.info("Fetching secrets for production...")
        secrets = secrets or SecretsService(settings)
        database_url = secrets.resolve(settings.DATABASE_URL_SECRET)
    else:
        database_url = settings.DATABASE_URL

    if not database_url:
        raise SecretResolutionError("DATABASE_URL not configured")

    return database_url.strip()
