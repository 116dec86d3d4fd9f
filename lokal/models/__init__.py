from lokal.models.business import Business
from lokal.models.deal import Deal
from lokal.models.profile import UserProfile
from lokal.models.saved_deal import SavedDeal
from lokal.models.redemption import Redemption
from lokal.models.business_lead import BusinessLead
from lokal.models.contract import Contract, ContractAssignment, ContractContact
from lokal.models.consumer_usage import ConsumerUsageDetail
