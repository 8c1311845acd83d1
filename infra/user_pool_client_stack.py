"""
infra/user_pool_client_stack.py -- Hosted-UI domain and the server-side app client.

The server client enables exactly one explicit auth flow, USER_SRP_AUTH, which
is what auth/cognito.py uses to sign users in. It has no client secret, so the
SRP exchange needs no secret hash. (CDK always adds ALLOW_REFRESH_TOKEN_AUTH
alongside any explicit flow.)

Output:
  UserPoolClientIdOutput  (export HtmxtodoUserPoolClientId)
"""

import aws_cdk as cdk
from aws_cdk import aws_cognito as cognito
from constructs import Construct

DOMAIN_PREFIX = "htmxtodo"
USER_POOL_CLIENT_ID_EXPORT = "HtmxtodoUserPoolClientId"


class UserPoolClientStack(cdk.Stack):
    def __init__(
        self,
        scope: Construct,
        construct_id: str,
        *,
        user_pool: cognito.IUserPool,
        **kwargs,
    ) -> None:
        super().__init__(scope, construct_id, **kwargs)

        cognito.UserPoolDomain(
            self,
            "UserPoolDomain",
            user_pool=user_pool,
            cognito_domain=cognito.CognitoDomainOptions(domain_prefix=DOMAIN_PREFIX),
        )

        client = cognito.UserPoolClient(
            self,
            "ServerClient",
            user_pool=user_pool,
            auth_flows=cognito.AuthFlow(user_srp=True),
        )

        # TODO: add a second client for the hosted-UI (external login) flow.

        cdk.CfnOutput(
            self,
            "UserPoolClientIdOutput",
            value=client.user_pool_client_id,
            export_name=USER_POOL_CLIENT_ID_EXPORT,
        )
