"""Natural-language to payment-action translation.

The intent layer turns free-text user messages into either a single payment intent (to pre-fill a
rule form) or an agent reply with an optional action from a closed set, using one hosted-model
completion per call.
"""
