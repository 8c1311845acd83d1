"""auth/ -- Authentication, session state, and CSRF protection for HtmxTodo.

Credentials are owned by the Cognito user pool provisioned in infra/. This
package only talks to it (auth/cognito.py), verifies the ID tokens it returns
(auth/tokens.py), and tracks the signed-in state in the session.

Layer rule: auth/ imports only stdlib, third-party libraries, and core/.
It does NOT import from api/, web/, or lists/.
api/ and web/ import from auth/, not the other way around.
"""
