from model.user import User
from model.food import FoodItem
from model.cart import CartItem
from model.promo import PromoCode, PromoRedemption, DiscountTypeEnum
from model.order import Order, OrderItem, OrderStatusLog, OrderStatusEnum, PaymentMethodEnum, StatusChangedByEnum
from model.review import Review
from model.revoked_token import RevokedToken
from model.wishlist import WishlistItem
